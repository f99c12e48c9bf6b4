"""Application tests for catalogue management commands."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.catalogue.category import Category
from storefront.catalogue.management import AddProduct, ChangeProductPrice, CreateCategory, RestockProduct
from storefront.catalogue.product import Product
from storefront.errors import ProductNotFound


def _create_category(name="Dairy & Eggs", **extra):
    return current_domain.process(CreateCategory(name=name, **extra), asynchronous=False)


class TestCategories:
    def test_create_category(self):
        category_id = _create_category(description="Milk, cheese and eggs")
        category = current_domain.repository_for(Category).get(category_id)
        assert category.name == "Dairy & Eggs"
        assert category.created_at is not None

    def test_nested_category(self):
        parent_id = _create_category("Bakery")
        child_id = _create_category("Bread", parent_category_id=parent_id)
        assert current_domain.repository_for(Category).get(child_id).parent_category_id == parent_id

    def test_unknown_parent_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _create_category("Bread", parent_category_id="cat-missing")
        assert "parent_category_id" in exc.value.messages

    def test_duplicate_name_rejected(self):
        _create_category("Frozen")
        with pytest.raises(ValidationError) as exc:
            _create_category("Frozen")
        assert "name" in exc.value.messages

    def test_name_length_limit(self):
        with pytest.raises(ValidationError):
            _create_category("x" * 51)


class TestProducts:
    def test_add_product_in_category(self):
        category_id = _create_category("Produce")
        product_id = current_domain.process(
            AddProduct(name="Gala Apples 1kg", price=3.20, stock_quantity=40, category_id=category_id),
            asynchronous=False,
        )
        product = current_domain.repository_for(Product).get(product_id)
        assert product.category_id == category_id
        assert product.stock_quantity == 40

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            current_domain.process(AddProduct(name="Kale", price=2.0, category_id="cat-missing"), asynchronous=False)

    def test_duplicate_product_name_rejected(self, make_product):
        make_product(name="Oat Milk")
        with pytest.raises(ValidationError):
            make_product(name="Oat Milk")

    def test_change_price(self, make_product):
        product_id = make_product(price=5.00)
        current_domain.process(
            ChangeProductPrice(product_id=product_id, price=5.00, is_on_sale=True, discount_price=4.50),
            asynchronous=False,
        )
        product = current_domain.repository_for(Product).get(product_id)
        assert float(product.selling_price) == 4.50

    def test_change_price_of_missing_product(self):
        with pytest.raises(ProductNotFound):
            current_domain.process(ChangeProductPrice(product_id="prod-missing", price=1.0), asynchronous=False)

    def test_restock_returns_new_stock(self, make_product):
        product_id = make_product(stock_quantity=2)
        result = current_domain.process(RestockProduct(product_id=product_id, quantity=5), asynchronous=False)
        assert result == 7

    def test_restock_rejects_non_positive(self, make_product):
        product_id = make_product()
        with pytest.raises(ValidationError):
            current_domain.process(RestockProduct(product_id=product_id, quantity=0), asynchronous=False)
