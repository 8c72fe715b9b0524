import time
from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from src.api.v1 import endpoints
from src.common.logger import logger
from src.db.CRUD import create_db, seed_db
from src.db.database import SessionLocal
from src.db.Models import product_models as _product_models  # важно импортировать модели до create_all
from src.settings.config import API_PREFIX, APP_TITLE, APP_VERSION


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting app .....")
    logger.info(create_db())
    db = SessionLocal()
    try:
        seed_db(db)
    finally:
        db.close()
    yield


app = FastAPI(title=APP_TITLE, version=APP_VERSION, lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method, request.url.path, response.status_code, elapsed_ms,
    )
    return response


def _errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # некорректное тело/параметры — 400, как и прочие ошибки ввода
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "errors": _errors(exc)},
    )


app.include_router(endpoints.router, prefix=API_PREFIX)
