from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping

from src.common.exceptions import UnsupportedCountry

# страна -> НДС, %
VAT_RATES: Mapping[str, float] = MappingProxyType(
    {
        "Sweden": 25.0,
        "Germany": 19.0,
        "France": 20.0,
    }
)

_BY_LOWER: Mapping[str, str] = MappingProxyType({name.lower(): name for name in VAT_RATES})


def supported_countries() -> List[str]:
    return list(VAT_RATES)


def canonical_country(country: str) -> str:
    """
    Название страны в написании реестра. Сравнение без учёта регистра.
    """
    name = _BY_LOWER.get((country or "").strip().lower())
    if name is None:
        raise UnsupportedCountry(country, supported_countries())
    return name


def vat_for(country: str) -> float:
    return VAT_RATES[canonical_country(country)]
