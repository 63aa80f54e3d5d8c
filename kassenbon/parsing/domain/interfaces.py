"""
Интерфейсы (абстрактные классы) для домена Parsing.

Домен Parsing отвечает за:
1. Очистку строк OCR
2. Извлечение полей чека (магазин, дата, время, суммы)
3. Сегментацию товарных позиций
4. Сопоставление позиций с bounding box
5. Перекрёстную валидацию и расчёт confidence
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from contracts.ocr_input_dto import OcrResult, RawLines
from contracts.receipt_dto import ParsedReceipt


class IReceiptParser(ABC):
    """Интерфейс для парсеров чеков (домен Parsing)."""

    @abstractmethod
    def parse(self, lines: RawLines, ocr_confidence: Optional[float] = None) -> ParsedReceipt:
        """
        Разбирает строки OCR в структурированный чек.

        Args:
            lines: Строки OCR (OcrLine или str) сверху вниз
            ocr_confidence: Общая уверенность OCR-движка (опционально)

        Returns:
            Структурированный чек
        """
        pass


class IParsingPipeline(IReceiptParser):
    """Интерфейс для пайплайна parsing (домен Parsing)."""

    @abstractmethod
    def process(self, lines: RawLines, ocr_confidence: Optional[float] = None):
        """
        Прогоняет строки через все этапы и возвращает результат со всеми
        промежуточными данными.
        """
        pass

    @abstractmethod
    def process_batch(
        self,
        receipts: Iterable[OcrResult],
        max_workers: Optional[int] = None,
    ) -> List[ParsedReceipt]:
        """
        Разбирает несколько чеков параллельно.

        Args:
            receipts: Результаты OCR по каждому чеку
            max_workers: Число потоков

        Returns:
            Чеки в том же порядке, что и на входе
        """
        pass
