"""
Stage 4: Line Items

ЦКП: Товарные позиции чека.

Input: PreprocessResult.lines, PatternTable
Output: ItemsResult(items[])

Алгоритм:
1. Товарная зона по позиции (шапка 3 / подвал 5, короткие чеки 1 / 2)
2. Отсев служебных строк по skip_keywords
3. Паттерны товаров по порядку; нераспознанные строки молча отбрасываются
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Tuple

from loguru import logger

from contracts.receipt_dto import LineItem
from kassenbon.parsing.locales.pattern_table import PatternTable
from kassenbon.parsing.s1_preprocess.stage import Line
from .item_parser import ItemParser
from .line_classifier import LineClassifier


@dataclass
class ItemsResult:
    """
    Результат Stage 4: Line Items.
    """
    items: List[LineItem] = field(default_factory=list)
    items_zone: Tuple[int, int] = (0, 0)
    candidate_count: int = 0
    unparsed_count: int = 0

    @property
    def items_total(self) -> Decimal:
        return sum((item.total_price for item in self.items), Decimal("0"))

    def to_dict(self) -> dict:
        return {
            "items_count": len(self.items),
            "items_total": str(self.items_total),
            "items_zone": list(self.items_zone),
            "candidate_count": self.candidate_count,
            "unparsed_count": self.unparsed_count,
        }


class ItemsStage:
    """
    Stage 4: Line Items.

    ЦКП: Список LineItem в порядке строк чека.
    """

    def __init__(self, table: PatternTable):
        self.classifier = LineClassifier(table)
        self.parser = ItemParser(table)

    def process(self, lines: List[Line]) -> ItemsResult:
        candidates = self.classifier.item_candidates(lines)

        items = []
        for line in candidates:
            item = self.parser.parse(line)
            if item is not None:
                items.append(item)

        result = ItemsResult(
            items=items,
            items_zone=self.classifier.find_items_zone(len(lines)),
            candidate_count=len(candidates),
            unparsed_count=len(candidates) - len(items),
        )
        logger.debug(
            f"[Stage 4: Items] {len(items)} товаров из {len(candidates)} строк-кандидатов, "
            f"сумма {result.items_total}"
        )
        return result
