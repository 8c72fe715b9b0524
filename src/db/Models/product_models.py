from sqlalchemy import CheckConstraint, Column, Float, ForeignKey, Integer, String, UniqueConstraint
from src.db.database import Base


class Product(Base):
    __tablename__ = "products"
    id = Column(String(255), primary_key=True)  # задаётся снаружи (prod-1, ...)
    name = Column(String(500), nullable=False)
    base_price = Column(Float, nullable=False)
    country = Column(String(100), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("base_price >= 0", name="ck_products_base_price"),
    )


class Discount(Base):
    __tablename__ = "discounts"
    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(String(255), ForeignKey("products.id"), nullable=False, index=True)
    discount_id = Column(String(255), nullable=False)
    percent = Column(Float, nullable=False)

    __table_args__ = (
        # идемпотентность обеспечивает БД, а не проверка в коде
        UniqueConstraint("product_id", "discount_id", name="uq_product_discount"),
        CheckConstraint("percent > 0 AND percent < 100", name="ck_discounts_percent"),
    )
