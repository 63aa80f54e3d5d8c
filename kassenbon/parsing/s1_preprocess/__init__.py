"""
Stage 1: Line Preprocess

ЦКП: Непустые строки чека с уверенностью OCR.
"""

from .stage import Line, LinePreprocessStage, PreprocessResult

__all__ = [
    "Line",
    "LinePreprocessStage",
    "PreprocessResult",
]
