import os
from typing import List, Tuple

from dotenv import load_dotenv

load_dotenv()

APP_TITLE = "Product Discount API"
APP_VERSION = "1.0.0"
API_PREFIX = "/api/v1"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# (id, name, base_price, country)
SEED_PRODUCTS: List[Tuple[str, str, float, str]] = [
    ("prod-1", "Swedish Meatballs", 12.99, "Sweden"),
    ("prod-2", "IKEA Chair", 149.99, "Sweden"),
    ("prod-3", "Berlin Bread", 4.50, "Germany"),
    ("prod-4", "BMW Model Car", 89.99, "Germany"),
    ("prod-5", "French Croissant", 3.75, "France"),
    ("prod-6", "Eiffel Tower Figurine", 24.99, "France"),
]
