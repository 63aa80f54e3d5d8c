"""
Item Parser - Парсинг товарных строк.

ЦКП: Строка чека -> LineItem (название, количество, цена за единицу, итог).

SRP: Только парсинг одной строки, без классификации строк и валидации сумм.
"""

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from loguru import logger

from contracts.receipt_dto import LineItem
from kassenbon.parsing.extraction.amount_normalizer import AmountNormalizer
from kassenbon.parsing.locales.pattern_table import PatternTable
from kassenbon.parsing.s1_preprocess.stage import Line


CENT = Decimal("0.01")


class ItemParser:
    """
    Парсер товарных строк.

    Паттерны пробуются в порядке таблицы, первый совпавший выигрывает:
    "name qty x unit total" -> "qty name total" -> "name total".
    """

    def __init__(self, table: PatternTable, normalizer: Optional[AmountNormalizer] = None):
        self.table = table
        self.normalizer = normalizer or AmountNormalizer()

    def parse(self, line: Line) -> Optional[LineItem]:
        """
        Парсит строку в товар.

        Args:
            line: Строка товарной зоны

        Returns:
            LineItem или None, если строка не похожа на товар
        """
        for pattern_name, regex in self.table.item_regexes:
            match = regex.match(line.text)
            if not match:
                continue

            item = self._build_item(line, match)
            if item is not None:
                logger.trace(f"[ItemParser] '{line.text}' -> {pattern_name}: {item.name} = {item.total_price}")
                return item

        logger.debug(f"[ItemParser] Строка {line.index} не распознана как товар: '{line.text}'")
        return None

    def _build_item(self, line: Line, match: re.Match) -> Optional[LineItem]:
        groups = match.groupdict()

        total = self.normalizer.normalize(groups.get("total"))
        if total is None or total < 0:
            return None

        quantity = 1
        if groups.get("quantity"):
            quantity = max(int(groups["quantity"]), 1)

        unit_price = self.normalizer.normalize(groups.get("unit_price"))
        if unit_price is None and quantity > 1:
            unit_price = (total / quantity).quantize(CENT, rounding=ROUND_HALF_UP)
        elif unit_price is None:
            unit_price = total

        return LineItem(
            raw_text=line.text,
            name=self.clean_name(groups.get("name")),
            unit_price=unit_price,
            total_price=total,
            quantity=quantity,
            confidence=line.confidence,
            source_line=line.index,
        )

    @staticmethod
    def clean_name(name: Optional[str]) -> Optional[str]:
        """Схлопывает пробелы, убирает мусор по краям ("* ", ":")."""
        if not name:
            return None
        cleaned = re.sub(r"\s+", " ", name).strip(" :*-")
        return cleaned or None
