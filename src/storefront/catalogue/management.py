"""Catalogue management — commands and handlers for the admin surface."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category import Category
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import ProductNotFound


@storefront.command(part_of="Category")
class CreateCategory:
    name: String(required=True, max_length=50)
    description: String(max_length=200)
    parent_category_id: Identifier()
    image_url: String(max_length=500)


@storefront.command(part_of="Product")
class AddProduct:
    name: String(required=True, max_length=200)
    description: Text()
    price: Float(required=True, min_value=0.0)
    stock_quantity: Integer(default=0, min_value=0)
    category_id: Identifier()
    image_url: String(max_length=500)
    is_on_sale: Boolean(default=False)
    discount_price: Float(min_value=0.0)


@storefront.command(part_of="Product")
class ChangeProductPrice:
    product_id: Identifier(required=True)
    price: Float(required=True, min_value=0.0)
    is_on_sale: Boolean(default=False)
    discount_price: Float(min_value=0.0)


@storefront.command(part_of="Product")
class RestockProduct:
    product_id: Identifier(required=True)
    quantity: Integer(required=True, min_value=1)


def _ensure_unique_name(aggregate_cls, name):
    matches = current_domain.repository_for(aggregate_cls)._dao.query.filter(name=name).all().items
    if matches:
        raise ValidationError({"name": [f"A {aggregate_cls.__name__.lower()} named '{name}' already exists"]})


def _load_product(product_id):
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise ProductNotFound({"product_id": [f"Product {product_id} does not exist"]}) from None


@storefront.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        _ensure_unique_name(Category, command.name.strip())

        repo = current_domain.repository_for(Category)
        if command.parent_category_id:
            try:
                repo.get(command.parent_category_id)
            except ObjectNotFoundError:
                raise ValidationError({"parent_category_id": ["Parent category does not exist"]}) from None

        category = Category.create(
            name=command.name,
            description=command.description,
            parent_category_id=command.parent_category_id,
            image_url=command.image_url,
        )
        repo.add(category)
        return str(category.id)


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        _ensure_unique_name(Product, command.name.strip())

        if command.category_id:
            try:
                current_domain.repository_for(Category).get(command.category_id)
            except ObjectNotFoundError:
                raise ValidationError({"category_id": ["Category does not exist"]}) from None

        product = Product.add(
            name=command.name.strip(),
            price=command.price,
            stock_quantity=command.stock_quantity or 0,
            description=command.description,
            category_id=command.category_id,
            image_url=command.image_url,
            is_on_sale=bool(command.is_on_sale),
            discount_price=command.discount_price,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(ChangeProductPrice)
    def change_price(self, command):
        product = _load_product(command.product_id)
        product.change_price(
            price=command.price,
            is_on_sale=bool(command.is_on_sale),
            discount_price=command.discount_price,
        )
        current_domain.repository_for(Product).add(product)

    @handle(RestockProduct)
    def restock(self, command):
        product = _load_product(command.product_id)
        product.restock(command.quantity)
        current_domain.repository_for(Product).add(product)
        return product.stock_quantity
