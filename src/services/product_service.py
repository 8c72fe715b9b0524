from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from src.common.countries import canonical_country, vat_for
from src.common.exceptions import NotFound, ValidationError
from src.common.pricing import final_price
from src.common.Schemas.product_schemas import (
    ApplyDiscountRequest,
    ProductResponse,
    ProductSchema,
)
from src.db import CRUD, ledger


def to_response(product: ProductSchema, vat_percent: float) -> ProductResponse:
    return ProductResponse(
        **product.model_dump(),
        final_price=final_price(product.base_price, product.discounts, vat_percent),
    )


def get_products_by_country(db: Session, country: Optional[str]) -> List[ProductResponse]:
    if country is None or not country.strip():
        raise ValidationError("Query parameter 'country' is required")
    # UnsupportedCountry до обращения к БД
    name = canonical_country(country)
    vat_percent = vat_for(name)
    return [to_response(p, vat_percent) for p in CRUD.get_products_by_country(db, name)]


def get_product(db: Session, product_id: str) -> ProductResponse:
    product = CRUD.get_product(db, product_id)
    if product is None:
        raise NotFound(product_id)
    return to_response(product, vat_for(product.country))


def apply_discount(db: Session, product_id: str, request: ApplyDiscountRequest) -> ProductResponse:
    if not product_id or not product_id.strip():
        raise ValidationError("Path parameter 'id' is required")
    ledger.validate_discount(request.discount_id, request.percent)

    # НДС до записи: страна продукта неизменна, а неизвестная страна
    # не должна оставить сохранённую скидку за ответом 400
    country = CRUD.get_product_country(db, product_id)
    if country is None:
        raise NotFound(product_id)
    vat_percent = vat_for(country)

    product = ledger.apply_discount(db, product_id, request.discount_id, request.percent)
    return to_response(product, vat_percent)
