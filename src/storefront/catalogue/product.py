"""Product aggregate — the authoritative price and stock for a catalogue item.

Stock is the contended value of the whole system: it is only decremented
inside the order-commitment unit of work, and concurrent writers are
detected through the aggregate's version.
"""

from datetime import UTC, datetime
from decimal import Decimal

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.errors import InsufficientStock
from storefront.shared.money import CENT, to_money


@storefront.aggregate
class Product:
    """An item on the shelf, with its current selling price and stock on hand."""

    name: String(required=True, max_length=200)
    description: Text()
    price: Float(required=True, min_value=0.0)
    stock_quantity: Integer(default=0, min_value=0)
    category_id: Identifier()
    image_url: String(max_length=500)
    is_on_sale: Boolean(default=False)
    discount_price: Float(min_value=0.0)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def discount_must_undercut_price(self):
        if not self.is_on_sale:
            return
        if self.discount_price is None or self.discount_price >= self.price:
            raise ValidationError({"discount_price": ["Discount price must be less than the original price"]})

    @invariant.post
    def sells_for_at_least_a_cent(self):
        if self.price is not None and to_money(self.price) < CENT:
            raise ValidationError({"price": ["Price must be at least 0.01"]})
        if self.is_on_sale and self.discount_price is not None and to_money(self.discount_price) < CENT:
            raise ValidationError({"discount_price": ["Discount price must be at least 0.01"]})

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.stock_quantity is not None and self.stock_quantity < 0:
            raise ValidationError({"stock_quantity": ["Stock quantity cannot be negative"]})

    @classmethod
    def add(
        cls,
        name,
        price,
        stock_quantity=0,
        description=None,
        category_id=None,
        image_url=None,
        is_on_sale=False,
        discount_price=None,
    ):
        from storefront.catalogue.events import ProductAdded

        now = datetime.now(UTC)
        product = cls(
            name=name,
            description=description,
            price=price,
            stock_quantity=stock_quantity,
            category_id=category_id,
            image_url=image_url,
            is_on_sale=is_on_sale,
            discount_price=discount_price,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=product.id,
                name=name,
                price=price,
                stock_quantity=stock_quantity,
                category_id=category_id,
                added_at=now,
            )
        )
        return product

    @property
    def selling_price(self) -> Decimal:
        """The price a customer pays today: the discount price while on sale."""
        if self.is_on_sale and self.discount_price is not None:
            return to_money(self.discount_price)
        return to_money(self.price)

    def change_price(self, price, is_on_sale=False, discount_price=None):
        from storefront.catalogue.events import ProductPriceChanged

        previous = float(self.selling_price)

        with atomic_change(self):
            self.price = price
            self.is_on_sale = is_on_sale
            self.discount_price = discount_price if is_on_sale else None

        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductPriceChanged(
                product_id=self.id,
                previous_price=previous,
                new_price=float(self.selling_price),
                is_on_sale=self.is_on_sale,
                discount_price=self.discount_price,
                changed_at=self.updated_at,
            )
        )

    def restock(self, quantity):
        from storefront.catalogue.events import ProductRestocked

        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Restock quantity must be positive"]})

        self.stock_quantity = self.stock_quantity + quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductRestocked(
                product_id=self.id,
                quantity=quantity,
                new_stock_quantity=self.stock_quantity,
                restocked_at=self.updated_at,
            )
        )

    def decrement_stock(self, quantity, order_id):
        """Take ``quantity`` units for an order, refusing to go below zero."""
        from storefront.catalogue.events import StockDecremented

        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be a positive integer"]})
        if quantity > self.stock_quantity:
            raise InsufficientStock(
                {
                    "stock_quantity": [
                        f"Insufficient stock for '{self.name}' ({self.id}): "
                        f"requested {quantity}, available {self.stock_quantity}"
                    ]
                }
            )

        self.stock_quantity = self.stock_quantity - quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockDecremented(
                product_id=self.id,
                order_id=order_id,
                quantity=quantity,
                remaining_stock=self.stock_quantity,
                decremented_at=self.updated_at,
            )
        )
