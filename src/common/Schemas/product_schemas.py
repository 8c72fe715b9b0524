from __future__ import annotations
from typing import List
from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    # в JSON — camelCase, в коде — snake_case
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class DiscountSchema(_CamelModel):
    """Скидка, применённая к продукту."""
    discount_id: str = Field(..., alias="discountId", description="Ключ идемпотентности")
    percent: float = Field(..., description="Процент скидки")


class ProductSchema(_CamelModel):
    """Продукт с текущим набором скидок."""
    id: str
    name: str
    base_price: float = Field(..., alias="basePrice", ge=0)
    country: str
    discounts: List[DiscountSchema] = Field(default_factory=list)


class ProductResponse(ProductSchema):
    """Продукт с итоговой ценой (скидки + НДС). Не хранится в БД."""
    final_price: float = Field(..., alias="finalPrice")


class ApplyDiscountRequest(_CamelModel):
    """
    Тело PUT /products/{id}/discount. discountId хранится как прислали,
    без нормализации; диапазон percent проверяет сервис.
    """
    discount_id: str = Field(..., alias="discountId", description="Ключ идемпотентности")
    percent: float = Field(..., description="Процент скидки, (0, 100)")
