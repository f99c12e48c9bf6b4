"""Order confirmation template — sent when an order is committed."""


class OrderConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        lines = context.get("lines", [])
        currency = context.get("currency", "USD")

        line_text = "\n".join(
            f"  {line['quantity']} x {line['name']} @ {currency} {line['unit_price']:.2f}" for line in lines
        )
        return {
            "subject": f"Order #{order_id} Received",
            "body": (
                f"Thanks for your order #{order_id}.\n\n"
                f"{line_text}\n\n"
                f"Items: {currency} {context.get('items_price', 0):.2f}\n"
                f"Tax: {currency} {context.get('tax_price', 0):.2f}\n"
                f"Shipping: {currency} {context.get('shipping_price', 0):.2f}\n"
                f"Total: {currency} {context.get('total_price', 0):.2f}\n\n"
                "We'll let you know as soon as it's on its way."
            ),
        }
