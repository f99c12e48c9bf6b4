"""FastAPI endpoints for the catalogue: categories, products, prices and stock."""

from fastapi import APIRouter, Depends
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.actors import current_actor, require_admin
from storefront.api.schemas import (
    AddProductRequest,
    CategoryIdResponse,
    ChangePriceRequest,
    CreateCategoryRequest,
    ProductIdResponse,
    ProductResponse,
    RestockRequest,
    StatusResponse,
    StockResponse,
)
from storefront.catalogue.management import AddProduct, ChangeProductPrice, CreateCategory, RestockProduct
from storefront.catalogue.product import Product
from storefront.errors import ProductNotFound
from storefront.shared.actor import Actor

product_router = APIRouter(prefix="/products", tags=["products"])
category_router = APIRouter(prefix="/categories", tags=["categories"])


# --- Category endpoints ---


@category_router.post("", status_code=201, response_model=CategoryIdResponse)
async def create_category(body: CreateCategoryRequest, actor: Actor = Depends(current_actor)) -> CategoryIdResponse:
    require_admin(actor)
    command = CreateCategory(
        name=body.name,
        description=body.description,
        parent_category_id=body.parent_category_id,
        image_url=body.image_url,
    )
    result = current_domain.process(command, asynchronous=False)
    return CategoryIdResponse(category_id=result)


# --- Product endpoints ---


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(body: AddProductRequest, actor: Actor = Depends(current_actor)) -> ProductIdResponse:
    require_admin(actor)
    command = AddProduct(
        name=body.name,
        description=body.description,
        price=body.price,
        stock_quantity=body.stock_quantity,
        category_id=body.category_id,
        image_url=body.image_url,
        is_on_sale=body.is_on_sale,
        discount_price=body.discount_price,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    try:
        product = current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise ProductNotFound({"product_id": [f"Product {product_id} does not exist"]}) from None

    return ProductResponse(
        product_id=str(product.id),
        name=product.name,
        description=product.description,
        price=product.price,
        selling_price=float(product.selling_price),
        stock_quantity=product.stock_quantity,
        category_id=str(product.category_id) if product.category_id else None,
        image_url=product.image_url,
        is_on_sale=bool(product.is_on_sale),
        discount_price=product.discount_price,
    )


@product_router.put("/{product_id}/price", response_model=StatusResponse)
async def change_price(
    product_id: str, body: ChangePriceRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_admin(actor)
    command = ChangeProductPrice(
        product_id=product_id,
        price=body.price,
        is_on_sale=body.is_on_sale,
        discount_price=body.discount_price,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="price_changed")


@product_router.post("/{product_id}/restock", response_model=StockResponse)
async def restock_product(product_id: str, body: RestockRequest, actor: Actor = Depends(current_actor)) -> StockResponse:
    require_admin(actor)
    command = RestockProduct(product_id=product_id, quantity=body.quantity)
    result = current_domain.process(command, asynchronous=False)
    return StockResponse(product_id=product_id, stock_quantity=result)
