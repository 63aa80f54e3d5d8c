"""
Домен Parsing: строки OCR -> ParsedReceipt.

Архитектура: 6-этапный пайплайн
- Stage 1: Preprocess (очистка строк, уверенность OCR)
- Stage 2: Store (название магазина)
- Stage 3: Metadata (дата, время, итог, subtotal, налог)
- Stage 4: Items (товарные позиции)
- Stage 5: BBox (bounding box позиций)
- Stage 6: Validation (проблемы разбора, confidence)

Вход: contracts.OcrResult / последовательность OcrLine | str
Выход: contracts.ParsedReceipt
"""

from kassenbon.parsing.pipeline import ParsingPipeline, PipelineResult
from kassenbon.parsing.locales import PatternTable

# Stage exports
from kassenbon.parsing.s1_preprocess import LinePreprocessStage, PreprocessResult, Line
from kassenbon.parsing.s2_store import StoreStage, StoreResult
from kassenbon.parsing.s3_metadata import MetadataStage, MetadataResult
from kassenbon.parsing.s4_items import ItemsStage, ItemsResult
from kassenbon.parsing.s5_bbox import BoundingBoxAssociator, BoundingBoxStage, BoundingBoxResult
from kassenbon.parsing.s6_validation import ValidationStage, ValidationResult, ConfidenceScorer

__all__ = [
    # Pipeline
    "ParsingPipeline",
    "PipelineResult",
    "PatternTable",
    # Stages
    "LinePreprocessStage",
    "PreprocessResult",
    "Line",
    "StoreStage",
    "StoreResult",
    "MetadataStage",
    "MetadataResult",
    "ItemsStage",
    "ItemsResult",
    "BoundingBoxAssociator",
    "BoundingBoxStage",
    "BoundingBoxResult",
    "ValidationStage",
    "ValidationResult",
    "ConfidenceScorer",
]
