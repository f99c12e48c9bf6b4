"""Order status update template — one message per status change."""

_HEADLINES = {
    "Processing": "is being prepared",
    "Out for Delivery": "is out for delivery",
    "Delivered": "has been delivered",
    "Cancelled": "has been cancelled",
    "Pending": "is awaiting payment",
}


class StatusUpdateTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        new_status = context.get("new_status", "")
        headline = _HEADLINES.get(new_status, f"is now {new_status}")
        return {
            "subject": f"Order #{order_id} {headline}",
            "body": (
                f"Your order #{order_id} {headline}.\n\n"
                f"Previous status: {context.get('previous_status', 'N/A')}\n"
                f"Current status: {new_status}"
            ),
        }
