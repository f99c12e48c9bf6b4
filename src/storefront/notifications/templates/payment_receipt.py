"""Payment receipt template — sent when the provider confirms payment."""


class PaymentReceiptTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        amount = context.get("amount", 0)
        currency = context.get("currency", "USD")
        return {
            "subject": f"Payment Received for Order #{order_id}",
            "body": (
                f"We received your payment of {currency} {amount:.2f} for order #{order_id}.\n\n"
                f"Reference: {context.get('payment_intent_id', 'N/A')}\n\n"
                "Your order is now being prepared."
            ),
        }
