"""Kassenbon - разбор текста немецких и австрийских кассовых чеков."""

from typing import Optional, Union

from contracts.ocr_input_dto import OcrResult, RawLines
from contracts.receipt_dto import ParsedReceipt
from kassenbon.parsing import ParsingPipeline, PatternTable

__version__ = "0.1.0"


def parse(
    lines: Union[RawLines, OcrResult],
    locale: Optional[str] = None,
    ocr_confidence: Optional[float] = None,
    associate_boxes: bool = True,
    **options,
) -> ParsedReceipt:
    """
    Разбирает строки OCR одного чека.

    Args:
        lines: Строки OCR (OcrLine или str) сверху вниз, либо OcrResult
        locale: Код локали (de_AT, de_DE); None = локаль по умолчанию
        ocr_confidence: Уверенность OCR-движка; None = оценка по строкам
        associate_boxes: Искать bounding box для позиций
        **options: Переопределения таблицы паттернов
            (known_retailers, date_formats, total_keywords, sum_mismatch_tolerance, ...)

    Returns:
        ParsedReceipt

    Raises:
        PatternTableError: Локаль не найдена или переопределения невалидны
        ParsingInputError: Вход не является последовательностью строк
    """
    table = PatternTable.load(locale).with_overrides(**options)
    pipeline = ParsingPipeline(table, associate_boxes=associate_boxes)
    return pipeline.parse(lines, ocr_confidence)


__all__ = [
    "parse",
    "ParsingPipeline",
    "PatternTable",
    "ParsedReceipt",
]
