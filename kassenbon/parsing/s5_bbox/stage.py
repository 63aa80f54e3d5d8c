"""
Stage 5: Bounding Box

ЦКП: Положение каждой товарной позиции на изображении (для подсветки в UI).

Input: ItemsResult.items, PreprocessResult.lines
Output: BoundingBoxResult(items[] с bounding_box)

Сопоставление позиции со строками OCR:
1. Строка-источник (Line.index == LineItem.source_line), если у неё есть box
2. Вхождение без учёта регистра: текст позиции в строке, либо строка
   (не короче BBOX_MIN_FRAGMENT_LENGTH) в тексте позиции
3. Ближайшая строка по расстоянию Левенштейна (строго < bbox_max_distance)
4. Иначе - пустой прямоугольник (0, 0, 0, 0)
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from Levenshtein import distance
from loguru import logger

from config.settings import BBOX_MIN_FRAGMENT_LENGTH
from contracts.ocr_input_dto import BoundingBox
from contracts.receipt_dto import LineItem
from kassenbon.parsing.s1_preprocess.stage import Line


@dataclass
class BoundingBoxResult:
    """
    Результат Stage 5: Bounding Box.
    """
    items: List[LineItem] = field(default_factory=list)
    matched_count: int = 0
    fuzzy_count: int = 0
    empty_count: int = 0

    def to_dict(self) -> dict:
        return {
            "items_count": len(self.items),
            "matched_count": self.matched_count,
            "fuzzy_count": self.fuzzy_count,
            "empty_count": self.empty_count,
        }


class BoundingBoxAssociator:
    """
    Ищет bounding box строки OCR для текста позиции.
    """

    def __init__(self, max_distance: int, min_fragment_length: int = BBOX_MIN_FRAGMENT_LENGTH):
        self.max_distance = max_distance
        self.min_fragment_length = min_fragment_length

    def find(self, text: str, lines: List[Line], source_line: Optional[int] = None) -> BoundingBox:
        """
        Args:
            text: Текст позиции (обычно LineItem.raw_text)
            lines: Строки OCR с bounding box
            source_line: Индекс исходной строки позиции во входе (LineItem.source_line)

        Returns:
            BoundingBox найденной строки или BoundingBox.empty()
        """
        box, _ = self.locate(text, lines, source_line)
        return box

    def locate(
        self, text: str, lines: List[Line], source_line: Optional[int] = None,
    ) -> Tuple[BoundingBox, str]:
        """Как find(), плюс способ сопоставления: source_line | contains | fuzzy | empty."""
        boxed = [line for line in lines if line.bounding_box is not None]

        if source_line is not None:
            for line in boxed:
                if line.index == source_line:
                    return line.bounding_box, "source_line"

        needle = text.lower()
        for line in boxed:
            candidate = line.text.lower()
            if needle in candidate:
                return line.bounding_box, "contains"
            if len(candidate) >= self.min_fragment_length and candidate in needle:
                return line.bounding_box, "contains"

        best: Optional[Line] = None
        best_distance = self.max_distance
        for line in boxed:
            d = distance(needle, line.text.lower())
            if d < best_distance:
                best, best_distance = line, d

        if best is not None:
            logger.trace(f"[BoundingBox] Fuzzy '{text}' -> '{best.text}' (distance={best_distance})")
            return best.bounding_box, "fuzzy"

        return BoundingBox.empty(), "empty"


class BoundingBoxStage:
    """
    Stage 5: Bounding Box.

    ЦКП: Позиции с заполненным bounding_box.
    """

    def __init__(self, max_distance: int):
        self.associator = BoundingBoxAssociator(max_distance)

    def process(self, items: List[LineItem], lines: List[Line]) -> BoundingBoxResult:
        result = BoundingBoxResult()

        for item in items:
            box, method = self.associator.locate(item.raw_text, lines, item.source_line)
            if method in ("source_line", "contains"):
                result.matched_count += 1
            elif method == "fuzzy":
                result.fuzzy_count += 1
            else:
                result.empty_count += 1
                logger.debug(f"[Stage 5: BBox] Нет bounding box для '{item.raw_text}'")
            result.items.append(item.model_copy(update={"bounding_box": box}))

        logger.debug(
            f"[Stage 5: BBox] {result.matched_count} точных, {result.fuzzy_count} fuzzy, "
            f"{result.empty_count} пустых"
        )
        return result
