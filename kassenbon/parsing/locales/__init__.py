"""
Локали парсинга: таблицы паттернов (YAML + pydantic).
"""

from .pattern_table import ItemPattern, PatternTable, StorePattern, build_date_regex

__all__ = [
    "ItemPattern",
    "PatternTable",
    "StorePattern",
    "build_date_regex",
]
