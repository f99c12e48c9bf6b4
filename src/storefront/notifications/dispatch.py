"""Notification dispatch — render a template and hand it to the email sender.

Dispatch is fire-and-forget: the order change that triggered it is already
committed, so a failed send is logged and never raised.
"""

from storefront.notifications.channel import get_email_sender
from storefront.notifications.templates import get_template
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def notify_customer(email: str | None, notification_type: str, context: dict) -> dict | None:
    """Send one notification. Returns the sender's result, or None when skipped."""
    if not email:
        logger.info(
            "Notification skipped, no customer email",
            notification_type=notification_type,
            order_id=context.get("order_id"),
        )
        return None

    content = get_template(notification_type).render(context)
    try:
        result = get_email_sender().send(
            to=email,
            subject=content["subject"],
            body=content["body"],
            html_body=content.get("html_body"),
        )
    except Exception as exc:
        logger.error(
            "Notification dispatch raised",
            notification_type=notification_type,
            order_id=context.get("order_id"),
            error=str(exc),
        )
        return {"message_id": None, "status": "failed", "error": str(exc)}

    if result.get("status") == "sent":
        logger.info(
            "Notification sent",
            notification_type=notification_type,
            order_id=context.get("order_id"),
            message_id=result.get("message_id"),
        )
    else:
        logger.warning(
            "Notification failed",
            notification_type=notification_type,
            order_id=context.get("order_id"),
            error=result.get("error"),
        )
    return result
