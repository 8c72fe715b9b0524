"""
Ошибки предметной области. HTTP-слой переводит их в коды ответа.
"""


class ProductApiError(Exception):
    """Базовая ошибка сервиса."""


class ValidationError(ProductApiError):
    """Некорректный ввод: форма запроса, процент вне (0, 100), нет параметра."""


class UnsupportedCountry(ProductApiError):
    def __init__(self, country: str, supported: list[str]) -> None:
        self.country = country
        self.supported = supported
        super().__init__(f"Unsupported country: {country}. Supported: {supported}")


class NotFound(ProductApiError):
    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class LockTimeout(ProductApiError):
    """Не дождались блокировки строки продукта за DISCOUNT_LOCK_TIMEOUT_MS."""

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id} is busy, retry later")
