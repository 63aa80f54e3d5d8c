"""
Stage 4: Line Items

ЦКП: Товарные позиции.
"""

from .stage import ItemsStage, ItemsResult
from .line_classifier import LineClassifier
from .item_parser import ItemParser

__all__ = [
    "ItemsStage",
    "ItemsResult",
    "LineClassifier",
    "ItemParser",
]
