"""
Журнал скидок: идемпотентное и безопасное при конкуренции применение скидки.

Протокол apply_discount (одна транзакция на запрос):
  1. SELECT ... FOR UPDATE по строке продукта — конкурирующие запросы к одному
     продукту выстраиваются в очередь, к разным продуктам идут параллельно;
  2. нет строки -> rollback + NotFound;
  3. INSERT ... ON CONFLICT (product_id, discount_id) DO NOTHING — единственный
     источник идемпотентности это уникальный индекс БД. Повтор с тем же
     discount_id ничего не меняет: побеждает первая запись, новый percent
     отбрасывается;
  4. перечитываем скидки в той же транзакции, commit.
Любая другая ошибка откатывает транзакцию целиком.

На sqlite FOR UPDATE не компилируется; писателей сериализует блокировка
всей базы, уникальный индекс работает так же.
"""
from __future__ import annotations

import math
from typing import Any

from sqlalchemy import select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from src.common.exceptions import LockTimeout, NotFound, ValidationError
from src.common.logger import logger
from src.common.Schemas.product_schemas import ProductSchema
from src.db.CRUD import load_discount_rows, to_product_schema
from src.db.Models.product_models import Discount, Product
from src.settings.db_settings import settings

MAX_DISCOUNT_ID_LEN = 255

# SQLSTATE lock_not_available (PostgreSQL)
PG_LOCK_NOT_AVAILABLE = "55P03"


def validate_discount(discount_id: Any, percent: Any) -> None:
    if not isinstance(discount_id, str) or not discount_id.strip():
        raise ValidationError("discountId must be a non-empty string")
    if len(discount_id) > MAX_DISCOUNT_ID_LEN:
        raise ValidationError(f"discountId must be at most {MAX_DISCOUNT_ID_LEN} characters")
    if isinstance(percent, bool) or not isinstance(percent, (int, float)):
        raise ValidationError("percent must be a number")
    if not math.isfinite(percent) or not 0 < percent < 100:
        raise ValidationError(
            f"Discount percent must be between 0 (exclusive) and 100 (exclusive), got: {percent}"
        )


def is_lock_timeout(exc: OperationalError) -> bool:
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    return code == PG_LOCK_NOT_AVAILABLE


def _set_lock_timeout(db: Session) -> None:
    timeout_ms = settings.DISCOUNT_LOCK_TIMEOUT_MS
    if timeout_ms > 0 and db.get_bind().dialect.name == "postgresql":
        # SET LOCAL не принимает bind-параметры
        db.execute(text(f"SET LOCAL lock_timeout = {int(timeout_ms)}"))


def _insert_ignoring_duplicate(db: Session, product_id: str, discount_id: str, percent: float) -> bool:
    """
    True — строка вставлена, False — такая (product_id, discount_id) уже есть.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(Discount)
    elif dialect == "sqlite":
        stmt = sqlite_insert(Discount)
    else:
        raise NotImplementedError(f"Unsupported database dialect: {dialect}")

    stmt = stmt.values(
        product_id=product_id, discount_id=discount_id, percent=percent
    ).on_conflict_do_nothing(index_elements=["product_id", "discount_id"])
    result = db.execute(stmt)
    return result.rowcount > 0


def apply_discount(db: Session, product_id: str, discount_id: str, percent: float) -> ProductSchema:
    validate_discount(discount_id, percent)

    try:
        _set_lock_timeout(db)
        product = db.execute(
            select(Product).where(Product.id == product_id).with_for_update()
        ).scalar_one_or_none()
        if product is None:
            raise NotFound(product_id)

        if _insert_ignoring_duplicate(db, product_id, discount_id, percent):
            logger.info("Applied discount '%s' (%s%%) to product '%s'", discount_id, percent, product_id)
        else:
            logger.info(
                "Discount '%s' already applied to product '%s' - skipping", discount_id, product_id
            )

        view = to_product_schema(product, load_discount_rows(db, product_id))
        db.commit()
    except OperationalError as exc:
        db.rollback()
        if is_lock_timeout(exc):
            logger.warning("Lock wait timed out for product '%s'", product_id)
            raise LockTimeout(product_id) from exc
        raise
    except Exception:
        db.rollback()
        raise

    return view
