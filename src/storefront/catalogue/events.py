"""Domain events for the Product and Category aggregates."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Category")
class CategoryCreated:
    """A new category was added to the catalogue."""

    __version__ = 1

    category_id: Identifier(required=True)
    name: String(required=True)
    parent_category_id: Identifier()


@storefront.event(part_of="Product")
class ProductAdded:
    """A new product was listed in the catalogue."""

    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    price: Float(required=True)
    stock_quantity: Integer(required=True)
    category_id: Identifier()
    added_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductPriceChanged:
    """The selling price of a product changed. Existing orders keep their snapshot."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_price: Float(required=True)
    new_price: Float(required=True)
    is_on_sale: Boolean(required=True)
    discount_price: Float()
    changed_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductRestocked:
    __version__ = 1

    product_id: Identifier(required=True)
    quantity: Integer(required=True)
    new_stock_quantity: Integer(required=True)
    restocked_at: DateTime(required=True)


@storefront.event(part_of="Product")
class StockDecremented:
    """Stock was taken for a committed order."""

    __version__ = 1

    product_id: Identifier(required=True)
    order_id: Identifier(required=True)
    quantity: Integer(required=True)
    remaining_stock: Integer(required=True)
    decremented_at: DateTime(required=True)
