from __future__ import annotations
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.common.logger import logger
from src.common.Schemas.product_schemas import DiscountSchema, ProductSchema
from src.db.database import Base, engine
from src.db.Models.product_models import Discount, Product
from src.settings.config import SEED_PRODUCTS

# ---------- служебные операции ----------

def create_db() -> str:
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as exp:
        if "already exists" in str(exp):
            logger.info("Database already exists")
            return "Database already exists"
        raise
    else:
        return "Database created successfully"

def drop_db() -> str:
    try:
        Base.metadata.drop_all(bind=engine)
    except Exception as exp:
        if "does not exist" in str(exp):
            logger.info("Database does not exist")
            return "Database does not exist"
        raise
    else:
        return "Database dropped successfully"

def seed_db(db: Session) -> int:
    """
    Начальные продукты. Только если таблица products пуста.
    """
    existing = db.scalar(select(func.count()).select_from(Product))
    if existing:
        logger.info("seed_db: %s products already present, skipping", existing)
        return 0

    db.add_all(
        Product(id=pid, name=name, base_price=price, country=country)
        for pid, name, price, country in SEED_PRODUCTS
    )
    db.commit()
    logger.info("seed_db: inserted=%s", len(SEED_PRODUCTS))
    return len(SEED_PRODUCTS)

# ---------- маппинг ----------

def _to_discount(row: Discount) -> DiscountSchema:
    return DiscountSchema(discount_id=row.discount_id, percent=row.percent)

def to_product_schema(product: Product, discounts: Sequence[Discount]) -> ProductSchema:
    return ProductSchema(
        id=product.id,
        name=product.name,
        base_price=product.base_price,
        country=product.country,
        discounts=[_to_discount(d) for d in discounts],
    )

# ---------- чтение ----------

def load_discount_rows(db: Session, product_id: str) -> List[Discount]:
    return list(
        db.scalars(
            select(Discount).where(Discount.product_id == product_id).order_by(Discount.id)
        ).all()
    )

def load_discounts(db: Session, product_id: str) -> List[DiscountSchema]:
    return [_to_discount(d) for d in load_discount_rows(db, product_id)]

def get_products_by_country(db: Session, country: str) -> List[ProductSchema]:
    """
    Продукты страны (без учёта регистра) вместе со скидками.
    Без блокировок: read committed достаточно.
    """
    products = db.scalars(
        select(Product).where(func.lower(Product.country) == country.strip().lower())
    ).all()
    if not products:
        return []

    ids = [p.id for p in products]
    rows = db.scalars(
        select(Discount).where(Discount.product_id.in_(ids)).order_by(Discount.id)
    ).all()
    by_product: Dict[str, List[Discount]] = {}
    for row in rows:
        by_product.setdefault(row.product_id, []).append(row)

    return [to_product_schema(p, by_product.get(p.id, [])) for p in products]

def get_product(db: Session, product_id: str) -> Optional[ProductSchema]:
    product = db.get(Product, product_id)
    if product is None:
        return None
    return to_product_schema(product, load_discount_rows(db, product_id))

def get_product_country(db: Session, product_id: str) -> Optional[str]:
    return db.scalar(select(Product.country).where(Product.id == product_id))
