"""
Stage 6: Validation

ЦКП: Список проблем разбора и итоговая уверенность.

Input: StoreResult, MetadataResult, items, ocr_confidence
Output: ValidationResult(issues[], confidence)

Правила (порядок проблем фиксирован):
1. Нет магазина / даты / итога -> MissingRequiredField
   (итог критичен, только если нет и товаров)
2. Итог после ключевого слова не разобрался -> InvalidCurrencyFormat
3. Нет товаров -> NoItemsFound (критично)
4. |сумма товаров - итог| > tolerance * итог -> ValidationFailed("itemSum")
5. Магазин не из списка известных сетей -> UnknownStore
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from loguru import logger

from contracts.issues import (
    InvalidCurrencyFormat, MissingRequiredField, NoItemsFound, ParseIssue,
    UnknownStore, ValidationFailed,
)
from contracts.receipt_dto import LineItem
from kassenbon.parsing.locales.pattern_table import PatternTable
from .confidence import ConfidenceScorer


@dataclass
class ValidationResult:
    """
    Результат Stage 6: Validation.
    """
    issues: List[ParseIssue] = field(default_factory=list)
    confidence: float = 0.1
    items_sum: Decimal = Decimal("0")
    difference: Optional[Decimal] = None
    tolerance: float = 0.2

    @property
    def passed(self) -> bool:
        return not any(isinstance(issue, ValidationFailed) for issue in self.issues)

    def to_dict(self) -> dict:
        return {
            "issues": [issue.code for issue in self.issues],
            "confidence": self.confidence,
            "items_sum": str(self.items_sum),
            "difference": str(self.difference) if self.difference is not None else None,
            "tolerance": self.tolerance,
            "passed": self.passed,
        }


class ValidationStage:
    """
    Stage 6: Validation.

    Чистая функция от извлечённых полей: одинаковый вход -> одинаковые проблемы.
    """

    def __init__(self, table: PatternTable, scorer: Optional[ConfidenceScorer] = None):
        self.table = table
        self.tolerance = Decimal(str(table.sum_mismatch_tolerance))
        self.scorer = scorer or ConfidenceScorer()

    def process(
        self,
        store_name: Optional[str],
        receipt_date: Optional[str],
        total_amount: Optional[Decimal],
        items: List[LineItem],
        ocr_confidence: float,
        invalid_total_raw: Optional[str] = None,
    ) -> ValidationResult:
        issues: List[ParseIssue] = []

        if not store_name:
            issues.append(MissingRequiredField(field_name="store_name"))
        if not receipt_date:
            issues.append(MissingRequiredField(field_name="receipt_date"))
        if total_amount is None:
            issues.append(MissingRequiredField(field_name="total_amount", is_critical=not items))

        if invalid_total_raw:
            issues.append(InvalidCurrencyFormat(raw=invalid_total_raw))

        if not items:
            issues.append(NoItemsFound())

        items_sum = sum((item.total_price for item in items), Decimal("0"))
        difference = None
        if items and total_amount is not None:
            difference = abs(items_sum - total_amount)
            if difference > self.tolerance * total_amount:
                logger.debug(
                    f"[Stage 6: Validation] Сумма товаров {items_sum} != итог {total_amount} "
                    f"(разница {difference})"
                )
                issues.append(ValidationFailed(detail="itemSum"))

        if store_name and not self.table.is_known_retailer(store_name):
            issues.append(UnknownStore(store_name=store_name))

        confidence = self.scorer.score(ocr_confidence, issues, len(items))

        logger.debug(
            f"[Stage 6: Validation] {len(issues)} проблем "
            f"({sum(1 for i in issues if i.is_critical)} критичных), confidence={confidence}"
        )
        return ValidationResult(
            issues=issues,
            confidence=confidence,
            items_sum=items_sum,
            difference=difference,
            tolerance=float(self.tolerance),
        )
