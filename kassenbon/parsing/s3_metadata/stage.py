"""
Stage 3: Metadata Extraction

ЦКП: Дата, время, итог, промежуточная сумма и налог чека.

Input: PreprocessResult.lines, PatternTable
Output: MetadataResult

Алгоритм:
1. Дата: строки сверху вниз, форматы в порядке таблицы -> DD.MM.YYYY
2. Время: первое HH:MM[:SS]
3. Итог: ключевые слова снизу вверх, fallback на последнюю сумму
4. Промежуточная сумма / налог: ключевое слово + сумма сразу за ним
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from loguru import logger

from kassenbon.parsing.locales.pattern_table import PatternTable
from kassenbon.parsing.s1_preprocess.stage import Line
from .date_extractor import DateExtractor
from .total_extractor import KeywordAmountExtractor


@dataclass
class MetadataResult:
    """
    Результат Stage 3: Metadata Extraction.
    """
    receipt_date: Optional[str] = None
    receipt_time: Optional[str] = None
    total_amount: Optional[Decimal] = None
    subtotal: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    total_raw: Optional[str] = None
    total_line_index: int = -1
    total_method: Optional[str] = None
    invalid_total_raw: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "receipt_date": self.receipt_date,
            "receipt_time": self.receipt_time,
            "total_amount": str(self.total_amount) if self.total_amount is not None else None,
            "subtotal": str(self.subtotal) if self.subtotal is not None else None,
            "tax_amount": str(self.tax_amount) if self.tax_amount is not None else None,
            "total_raw": self.total_raw,
            "total_line_index": self.total_line_index,
            "total_method": self.total_method,
            "invalid_total_raw": self.invalid_total_raw,
        }


class MetadataStage:
    """
    Stage 3: Metadata Extraction.

    ЦКП: Поля чека кроме магазина и товаров.
    """

    def __init__(self, table: PatternTable):
        self.date_extractor = DateExtractor(table)
        self.amount_extractor = KeywordAmountExtractor(table)

    def process(self, lines: List[Line]) -> MetadataResult:
        date_result = self.date_extractor.extract_date(lines)
        time_result = self.date_extractor.extract_time(lines)
        total = self.amount_extractor.extract_total(lines)
        subtotal = self.amount_extractor.extract_subtotal(lines)
        tax = self.amount_extractor.extract_tax(lines)

        result = MetadataResult(
            receipt_date=date_result.date,
            receipt_time=time_result.time,
            total_amount=total.amount,
            subtotal=subtotal.amount,
            tax_amount=tax.amount,
            total_raw=total.raw,
            total_line_index=total.line_index,
            total_method=total.method,
            invalid_total_raw=total.invalid_raw,
        )

        logger.debug(
            f"[Stage 3: Metadata] Дата: {result.receipt_date} {result.receipt_time or ''}, "
            f"Итог: {result.total_amount} ({result.total_method}), "
            f"Subtotal: {result.subtotal}, MwSt: {result.tax_amount}"
        )
        return result
