"""Template registry — maps notification types to template classes."""

from enum import Enum

from storefront.notifications.templates.order_confirmation import OrderConfirmationTemplate
from storefront.notifications.templates.payment_receipt import PaymentReceiptTemplate
from storefront.notifications.templates.status_update import StatusUpdateTemplate


class NotificationType(Enum):
    ORDER_CONFIRMATION = "OrderConfirmation"
    PAYMENT_RECEIPT = "PaymentReceipt"
    STATUS_UPDATE = "StatusUpdate"


TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.ORDER_CONFIRMATION.value: OrderConfirmationTemplate,
    NotificationType.PAYMENT_RECEIPT.value: PaymentReceiptTemplate,
    NotificationType.STATUS_UPDATE.value: StatusUpdateTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
