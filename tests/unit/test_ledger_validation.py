"""
Проверки ввода журнала скидок и распознавание таймаута блокировки.
Сессия-заглушка падает при любом обращении: валидация идёт до БД.
"""

import math
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from src.common.exceptions import LockTimeout, ValidationError
from src.db.ledger import apply_discount, is_lock_timeout, validate_discount
from src.settings.db_settings import settings


class _ExplodingSession:

    def __getattr__(self, name):
        raise AssertionError(f"storage accessed: {name}")


class TestValidateDiscount:

    @pytest.mark.parametrize("percent", [0, 0.0, 100, 100.0, -5.0, 150.0, math.nan, math.inf])
    def test_rejects_out_of_range(self, percent: float) -> None:
        with pytest.raises(ValidationError):
            validate_discount("A", percent)

    @pytest.mark.parametrize("percent", [0.01, 50, 99.99])
    def test_accepts_open_interval(self, percent: float) -> None:
        validate_discount("A", percent)

    @pytest.mark.parametrize("discount_id", ["", "   ", None, "x" * 256])
    def test_rejects_bad_discount_id(self, discount_id) -> None:
        with pytest.raises(ValidationError):
            validate_discount(discount_id, 10.0)

    def test_rejects_non_numeric_percent(self) -> None:
        with pytest.raises(ValidationError):
            validate_discount("A", "10")
        with pytest.raises(ValidationError):
            validate_discount("A", True)

    def test_invalid_input_never_touches_storage(self) -> None:
        with pytest.raises(ValidationError):
            apply_discount(_ExplodingSession(), "prod-1", "A", 100.0)  # type: ignore[arg-type]


class _PgError(Exception):
    def __init__(self, pgcode: str) -> None:
        super().__init__(pgcode)
        self.pgcode = pgcode


class TestIsLockTimeout:

    def test_lock_not_available(self) -> None:
        exc = OperationalError("SELECT 1", {}, _PgError("55P03"))
        assert is_lock_timeout(exc)

    def test_other_operational_error(self) -> None:
        exc = OperationalError("SELECT 1", {}, _PgError("08006"))
        assert not is_lock_timeout(exc)

    def test_driver_without_sqlstate(self) -> None:
        exc = OperationalError("SELECT 1", {}, Exception("database is locked"))
        assert not is_lock_timeout(exc)


class _PostgresSession:
    """Сессия-заглушка PostgreSQL: N-й execute падает с заданным SQLSTATE."""

    def __init__(self, fail_on: int, pgcode: str) -> None:
        self.fail_on = fail_on
        self.pgcode = pgcode
        self.statements: list[str] = []
        self.rolled_back = False
        self.committed = False

    def get_bind(self):
        return SimpleNamespace(dialect=SimpleNamespace(name="postgresql"))

    def execute(self, stmt):
        self.statements.append(str(stmt))
        if len(self.statements) == self.fail_on:
            raise OperationalError(str(stmt), {}, _PgError(self.pgcode))
        return SimpleNamespace()

    def rollback(self) -> None:
        self.rolled_back = True

    def commit(self) -> None:
        self.committed = True


class TestLockWait:

    def test_lock_not_available_becomes_lock_timeout(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "DISCOUNT_LOCK_TIMEOUT_MS", 250)
        db = _PostgresSession(fail_on=2, pgcode="55P03")

        with pytest.raises(LockTimeout) as exc_info:
            apply_discount(db, "prod-1", "A", 10.0)  # type: ignore[arg-type]

        assert exc_info.value.product_id == "prod-1"
        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert db.statements[0] == "SET LOCAL lock_timeout = 250"
        assert "FOR UPDATE" in db.statements[1]
        assert db.rolled_back
        assert not db.committed

    def test_no_lock_timeout_statement_when_unbounded(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "DISCOUNT_LOCK_TIMEOUT_MS", 0)
        db = _PostgresSession(fail_on=1, pgcode="55P03")

        with pytest.raises(LockTimeout):
            apply_discount(db, "prod-1", "A", 10.0)  # type: ignore[arg-type]
        assert "FOR UPDATE" in db.statements[0]

    def test_other_operational_error_propagates(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "DISCOUNT_LOCK_TIMEOUT_MS", 0)
        db = _PostgresSession(fail_on=1, pgcode="08006")

        with pytest.raises(OperationalError):
            apply_discount(db, "prod-1", "A", 10.0)  # type: ignore[arg-type]
        assert db.rolled_back
