from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette import status

from src.common.exceptions import LockTimeout, NotFound, UnsupportedCountry, ValidationError
from src.common.logger import logger
from src.common.Schemas.product_schemas import ApplyDiscountRequest, ProductResponse
from src.db.database import get_db
from src.services import product_service

router: APIRouter = APIRouter()

INTERNAL_ERROR = "Internal server error"

# Обработчики синхронные: FastAPI выполняет их в пуле потоков,
# ожидание блокировки строки не останавливает event loop.

# ---------------- Products ---------------- #

@router.get("/products", tags=["Products"], response_model=List[ProductResponse])
def list_products(
    country: Optional[str] = Query(default=None, description="Страна, например Sweden"),
    db: Session = Depends(get_db),
) -> List[ProductResponse]:
    try:
        return product_service.get_products_by_country(db, country)
    except (ValidationError, UnsupportedCountry) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error("Unexpected error listing products - %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR
        )


@router.get("/products/{product_id}", tags=["Products"], response_model=ProductResponse)
def get_product(
    product_id: str,
    db: Session = Depends(get_db),
) -> ProductResponse:
    try:
        return product_service.get_product(db, product_id)
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error("Unexpected error reading product %s - %s", product_id, e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR
        )


@router.put("/products/{product_id}/discount", tags=["Products"], response_model=ProductResponse)
def apply_discount(
    product_id: str,
    payload: ApplyDiscountRequest,
    db: Session = Depends(get_db),
) -> ProductResponse:
    """
    Идемпотентно: повтор с тем же discountId возвращает тот же результат.
    """
    try:
        return product_service.apply_discount(db, product_id, payload)
    except (ValidationError, UnsupportedCountry) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except LockTimeout as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
            headers={"Retry-After": "1"},
        )
    except Exception as e:
        logger.error("Unexpected error applying discount to %s - %s", product_id, e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR
        )


# ---------------- DB utils ---------------- #

@router.get("/status_DB", tags=["database"])
def get_db_status(
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    Health-check: БД отвечает на SELECT 1.
    """
    try:
        db.scalar(text("SELECT 1"))
        return {"status": status.HTTP_200_OK, "dialect": db.get_bind().dialect.name}
    except Exception as e:
        logger.error("DB health-check failed - %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error connecting to DB",
        )
