"""
Stage 1: Line Preprocess

ЦКП: Чистый упорядоченный список непустых строк с уверенностью OCR.

Input: Sequence[OcrLine | str] (или сплошной текст)
Output: PreprocessResult(lines[], ocr_confidence)

- Обрезаем пробелы по краям (внутренние пробелы сохраняем: по ним режутся колонки)
- Пустые строки выбрасываем, порядок сохраняем
- Line.index - позиция во ВХОДНОЙ последовательности (для LineItem.source_line)
- Без уверенности от движка она оценивается: среднее по строкам минус
  UNREADABLE_LINE_PENALTY за каждую строку с нечитаемыми символами ("???", U+FFFD)
"""

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from config.settings import UNREADABLE_LINE_PENALTY
from contracts.ocr_input_dto import BoundingBox, OcrLine, RawLines
from kassenbon.parsing.domain.exceptions import ParsingInputError


# Символы, которыми OCR помечает нераспознанный текст
UNREADABLE_PATTERN = re.compile(r"\?{2,}|\ufffd")


@dataclass(frozen=True)
class Line:
    """Очищенная строка чека."""
    text: str
    index: int
    confidence: float = 1.0
    bounding_box: Optional[BoundingBox] = None

    @property
    def is_unreadable(self) -> bool:
        return UNREADABLE_PATTERN.search(self.text) is not None


@dataclass
class PreprocessResult:
    """
    Результат Stage 1: Line Preprocess.
    """
    lines: List[Line] = field(default_factory=list)
    ocr_confidence: float = 0.0
    original_count: int = 0
    removed_count: int = 0
    unreadable_count: int = 0

    @property
    def texts(self) -> List[str]:
        return [line.text for line in self.lines]

    @property
    def raw_text(self) -> str:
        return "\n".join(self.texts)

    @property
    def has_bounding_boxes(self) -> bool:
        return any(line.bounding_box is not None for line in self.lines)

    def to_dict(self) -> dict:
        return {
            "lines_count": len(self.lines),
            "ocr_confidence": self.ocr_confidence,
            "original_count": self.original_count,
            "removed_count": self.removed_count,
            "unreadable_count": self.unreadable_count,
        }


class LinePreprocessStage:
    """
    Stage 1: Line Preprocess.

    ЦКП: Непустые строки + общая уверенность OCR.
    """

    def process(self, lines: RawLines, ocr_confidence: Optional[float] = None) -> PreprocessResult:
        """
        Очищает входные строки.

        Args:
            lines: OcrLine, str или dict (формат OcrLine.from_dict); сплошной текст режется по строкам
            ocr_confidence: Уверенность движка; None = оценка по строкам

        Returns:
            PreprocessResult

        Raises:
            ParsingInputError: Вход не является последовательностью строк
                или уверенность не число (NaN)
        """
        raw_lines = self._to_ocr_lines(lines)

        cleaned = []
        for index, ocr_line in enumerate(raw_lines):
            text = (ocr_line.text or "").strip()
            if not text:
                continue
            cleaned.append(Line(
                text=text,
                index=index,
                confidence=self._clamp(ocr_line.confidence, f"строки {index}"),
                bounding_box=ocr_line.bounding_box,
            ))

        unreadable_count = sum(1 for line in cleaned if line.is_unreadable)
        if ocr_confidence is not None:
            confidence = self._clamp(ocr_confidence, "OCR")
        elif cleaned:
            confidence = sum(line.confidence for line in cleaned) / len(cleaned)
            confidence = max(confidence - UNREADABLE_LINE_PENALTY * unreadable_count, 0.0)
        else:
            confidence = 0.0

        result = PreprocessResult(
            lines=cleaned,
            ocr_confidence=confidence,
            original_count=len(raw_lines),
            removed_count=len(raw_lines) - len(cleaned),
            unreadable_count=unreadable_count,
        )
        logger.debug(
            f"[Stage 1: Preprocess] {result.original_count} строк -> {len(cleaned)} "
            f"(удалено пустых: {result.removed_count}), ocr_confidence={confidence:.3f}"
        )
        if unreadable_count:
            logger.debug(f"[Stage 1: Preprocess] Нечитаемых строк: {unreadable_count}")
        return result

    @staticmethod
    def _clamp(value, label: str) -> float:
        try:
            confidence = float(value)
        except (TypeError, ValueError):
            confidence = math.nan
        if math.isnan(confidence):
            raise ParsingInputError(
                f"Уверенность {label} не число: {value!r}",
                component="LinePreprocessStage",
            )
        return min(max(confidence, 0.0), 1.0)

    def _to_ocr_lines(self, lines: RawLines) -> List[OcrLine]:
        if lines is None:
            return []
        if isinstance(lines, str):
            lines = lines.splitlines()
        if not isinstance(lines, Iterable):
            raise ParsingInputError(
                f"Ожидалась последовательность строк, получено: {type(lines).__name__}",
                component="LinePreprocessStage",
            )

        result = []
        for item in lines:
            if isinstance(item, OcrLine):
                result.append(item)
            elif item is None:
                result.append(OcrLine(text=""))
            elif isinstance(item, str):
                result.append(OcrLine(text=item))
            elif isinstance(item, dict):
                result.append(OcrLine.from_dict(item))
            else:
                raise ParsingInputError(
                    f"Неподдерживаемый тип строки: {type(item).__name__}",
                    component="LinePreprocessStage",
                )
        return result
