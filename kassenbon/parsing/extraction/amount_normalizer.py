import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List, Optional
from loguru import logger


# Денежная сумма в немецком/австрийском формате: "1.234,56", "12,99", ",99", "-1,20",
# кассовый минус справа "0,50-" и прочитанная OCR точка "12.99".
# Точка без ровно двух цифр после неё (дата "25.09.2025", вес "1.234") - не сумма.
AMOUNT_PATTERN = (
    r"(?<![\d.,])-?"
    r"(?:(?:\d{1,3}(?:\.\d{3})+|\d*),\d{2}(?![\d,])|\d+\.\d{2}(?![\d.,]))"
    r"(?:-(?!\d))?"
)


@dataclass(frozen=True)
class AmountMatch:
    """Найденная в строке сумма."""
    raw: str
    value: Decimal
    start: int
    end: int


class AmountNormalizer:
    """
    Элемент-функция: Нормализует денежную сумму из строки чека в Decimal.

    Формат de_DE / de_AT: "." - разделитель тысяч, "," - десятичный,
    символ "€" (или "EUR") слева или справа.

    Никогда не бросает исключений: None означает "здесь суммы нет",
    вызывающий код продолжает искать в других строках.
    """

    # Канонический немецкий формат после очистки
    GERMAN_SHAPE = re.compile(r"^-?(?:\d{1,3}(?:\.\d{3})+|\d*)(?:,\d+)?$")

    # OCR часто читает "," как "." - "12.99" без запятой считаем десятичной точкой
    DOT_DECIMAL_SHAPE = re.compile(r"^-?\d+\.\d{2}$")

    CURRENCY_PATTERN = re.compile(r"€|EUR", re.IGNORECASE)

    def __init__(self):
        self.amount_pattern = re.compile(AMOUNT_PATTERN)

    def normalize(self, text: Optional[str]) -> Optional[Decimal]:
        """
        ЦКП: Нормализованная сумма (Decimal) или None.

        Args:
            text: Фрагмент строки, уже выделенный regex-группой

        Returns:
            Decimal: Сумма или None
        """
        if not text or not isinstance(text, str):
            return None

        clean = self.CURRENCY_PATTERN.sub("", text)
        clean = re.sub(r"\s+", "", clean)

        # Кассовый формат отрицательных сумм: "1,20-"
        if clean.endswith("-") and not clean.startswith("-"):
            clean = "-" + clean[:-1]

        if not any(ch.isdigit() for ch in clean):
            logger.trace(f"[AmountNormalizer] Нет цифр: '{text}'")
            return None

        if self.GERMAN_SHAPE.match(clean):
            # Сначала убираем разделитель тысяч, потом меняем десятичный
            normalized = clean.replace(".", "").replace(",", ".")
        elif self.DOT_DECIMAL_SHAPE.match(clean):
            normalized = clean
        else:
            logger.trace(f"[AmountNormalizer] Не денежный формат: '{text}'")
            return None

        try:
            return Decimal(normalized)
        except InvalidOperation:
            logger.warning(f"[AmountNormalizer] Ошибка нормализации суммы: {text}")
            return None

    def find_all(self, text: str) -> List[AmountMatch]:
        """
        Находит все суммы в строке (слева направо).

        Args:
            text: Строка чека

        Returns:
            Список AmountMatch (может быть пустым)
        """
        if not text:
            return []

        matches = []
        for m in self.amount_pattern.finditer(text):
            value = self.normalize(m.group(0))
            if value is not None:
                matches.append(AmountMatch(raw=m.group(0), value=value, start=m.start(), end=m.end()))
        return matches

    def find_last(self, text: str) -> Optional[AmountMatch]:
        """Последняя (самая правая) сумма в строке."""
        matches = self.find_all(text)
        return matches[-1] if matches else None


_default_normalizer = AmountNormalizer()


def normalize_amount(text: Optional[str]) -> Optional[Decimal]:
    """Удобная обёртка над AmountNormalizer.normalize."""
    return _default_normalizer.normalize(text)


def find_amounts(text: str) -> List[AmountMatch]:
    """Все суммы строгого формата в строке, с позициями."""
    return _default_normalizer.find_all(text)
