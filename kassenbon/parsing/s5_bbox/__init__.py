"""
Stage 5: Bounding Box

ЦКП: Положение позиций на изображении.
"""

from .stage import BoundingBoxAssociator, BoundingBoxResult, BoundingBoxStage

__all__ = [
    "BoundingBoxAssociator",
    "BoundingBoxResult",
    "BoundingBoxStage",
]
