"""Storefront bounded context — Catalogue, Order Commitment, Payments, Delivery.

Products and Orders live in one domain so the commitment workflow can
decrement stock and write the order inside a single unit of work.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging(log_dir="logs", log_file_prefix="storefront")

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
