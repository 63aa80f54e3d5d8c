"""
Stage 2: Store Detection

ЦКП: Название магазина.
"""

from .stage import StoreResult, StoreStage, format_store_name

__all__ = [
    "StoreResult",
    "StoreStage",
    "format_store_name",
]
