"""
Line Classifier - Классификация строк чека.

ЦКП: Границы товарной зоны и отсев служебных строк.

SRP: Только классификация строк, без парсинга товаров.
"""

from typing import List, Tuple

from loguru import logger

from kassenbon.parsing.locales.pattern_table import PatternTable
from kassenbon.parsing.s1_preprocess.stage import Line


class LineClassifier:
    """
    Классификатор строк чека.

    Товарная зона определяется только по позиции: шапка (магазин, адрес,
    дата) и подвал (итоги, оплата, налоги) отрезаются фиксированным
    числом строк, у коротких чеков - меньшим.
    """

    def __init__(self, table: PatternTable):
        self.table = table

    def find_items_zone(self, line_count: int) -> Tuple[int, int]:
        """
        Границы товарной зоны [start, end) в списке очищенных строк.

        Args:
            line_count: Число непустых строк

        Returns:
            (start, end); пустая зона, если строк слишком мало
        """
        if line_count > self.table.short_receipt_threshold:
            header, footer = self.table.header_line_count, self.table.footer_line_count
        else:
            header, footer = self.table.short_header_line_count, self.table.short_footer_line_count

        start = min(header, line_count)
        end = max(line_count - footer, start)
        logger.trace(f"[LineClassifier] Товарная зона [{start}, {end}) из {line_count} строк")
        return start, end

    def item_candidates(self, lines: List[Line]) -> List[Line]:
        """Строки товарной зоны без служебных."""
        start, end = self.find_items_zone(len(lines))
        candidates = []
        for line in lines[start:end]:
            if self.should_skip(line.text):
                logger.trace(f"[LineClassifier] Служебная строка {line.index}: '{line.text}'")
                continue
            candidates.append(line)
        return candidates

    def should_skip(self, text: str) -> bool:
        """
        Определяет, нужно ли пропустить строку (служебная/техническая).
        """
        return self.table.is_skip_line(text)
