"""
Stage 3: Metadata Extraction

ЦКП: Дата, время, итог, промежуточная сумма, налог.
"""

from .stage import MetadataStage, MetadataResult
from .date_extractor import DateExtractor, DateResult, TimeResult
from .total_extractor import AmountResult, KeywordAmountExtractor

__all__ = [
    "MetadataStage",
    "MetadataResult",
    "DateExtractor",
    "DateResult",
    "TimeResult",
    "AmountResult",
    "KeywordAmountExtractor",
]
