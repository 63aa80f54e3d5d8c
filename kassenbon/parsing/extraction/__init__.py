"""
Элементы-функции извлечения, общие для всех этапов.
"""

from .amount_normalizer import AMOUNT_PATTERN, AmountMatch, AmountNormalizer, find_amounts, normalize_amount

__all__ = [
    "AMOUNT_PATTERN",
    "AmountMatch",
    "AmountNormalizer",
    "find_amounts",
    "normalize_amount",
]
