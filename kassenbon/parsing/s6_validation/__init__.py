"""
Stage 6: Validation

ЦКП: Проблемы разбора и итоговая уверенность.
"""

from .stage import ValidationStage, ValidationResult
from .confidence import ConfidenceScorer

__all__ = [
    "ValidationStage",
    "ValidationResult",
    "ConfidenceScorer",
]
