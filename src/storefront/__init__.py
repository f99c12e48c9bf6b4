"""Storefront: catalogue, order commitment, payment reconciliation and delivery tracking."""
