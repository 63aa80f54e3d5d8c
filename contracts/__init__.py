"""
Контракты DTO движка разбора чеков.

Контракты:
- OCR -> Parsing: OcrLine, OcrResult, BoundingBox (ocr_input_dto.py)
- Parsing -> вызывающая сторона: ParsedReceipt, LineItem (receipt_dto.py)
- Проблемы разбора: ParseIssue и его варианты (issues.py)
"""

# OCR -> Parsing
from .ocr_input_dto import BoundingBox, OcrLine, OcrResult, RawLines

# Проблемы разбора
from .issues import (
    ParseIssue,
    MissingRequiredField,
    InvalidCurrencyFormat,
    NoItemsFound,
    ValidationFailed,
    UnknownStore,
)

# Parsing -> вызывающая сторона
from .receipt_dto import LineItem, ParsedReceipt

__all__ = [
    # OCR -> Parsing
    "BoundingBox",
    "OcrLine",
    "OcrResult",
    "RawLines",
    # Issues
    "ParseIssue",
    "MissingRequiredField",
    "InvalidCurrencyFormat",
    "NoItemsFound",
    "ValidationFailed",
    "UnknownStore",
    # Parsing -> caller
    "LineItem",
    "ParsedReceipt",
]
