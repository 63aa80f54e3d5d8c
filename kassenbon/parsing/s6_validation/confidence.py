from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from config.settings import (
    CRITICAL_ISSUE_PENALTY, ISSUE_PENALTY, ITEMS_FOUND_BONUS, MANY_ITEMS_BONUS,
    MANY_ITEMS_THRESHOLD, MAX_CONFIDENCE, MIN_CONFIDENCE,
)
from contracts.issues import ParseIssue


class ConfidenceScorer:
    """
    Итоговая уверенность разбора.

    confidence = ocr - 0.25 * критичные - 0.10 * некритичные
                 + 0.10 (есть товары) + 0.05 (товаров >= 3),
    затем clamp в [0.1, 1.0]. Считается в Decimal, чтобы результат
    не зависел от порядка операций с float.
    """

    PRECISION = Decimal("0.0001")

    def __init__(
        self,
        critical_penalty: float = CRITICAL_ISSUE_PENALTY,
        issue_penalty: float = ISSUE_PENALTY,
        items_bonus: float = ITEMS_FOUND_BONUS,
        many_items_bonus: float = MANY_ITEMS_BONUS,
        many_items_threshold: int = MANY_ITEMS_THRESHOLD,
    ):
        self.critical_penalty = Decimal(str(critical_penalty))
        self.issue_penalty = Decimal(str(issue_penalty))
        self.items_bonus = Decimal(str(items_bonus))
        self.many_items_bonus = Decimal(str(many_items_bonus))
        self.many_items_threshold = many_items_threshold

    def score(self, ocr_confidence: float, issues: Sequence[ParseIssue], item_count: int) -> float:
        critical = sum(1 for issue in issues if issue.is_critical)
        non_critical = len(issues) - critical

        value = Decimal(str(ocr_confidence))
        value -= self.critical_penalty * critical
        value -= self.issue_penalty * non_critical
        if item_count >= 1:
            value += self.items_bonus
        if item_count >= self.many_items_threshold:
            value += self.many_items_bonus

        value = min(max(value, Decimal(str(MIN_CONFIDENCE))), Decimal(str(MAX_CONFIDENCE)))
        return float(value.quantize(self.PRECISION, rounding=ROUND_HALF_UP))
