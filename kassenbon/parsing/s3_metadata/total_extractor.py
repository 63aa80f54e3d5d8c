import re
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from loguru import logger

from kassenbon.parsing.extraction.amount_normalizer import AMOUNT_PATTERN, AmountNormalizer
from kassenbon.parsing.locales.pattern_table import PatternTable
from kassenbon.parsing.s1_preprocess.stage import Line


# Токен, похожий на сумму: цифры/"?" с разделителями ("11,61", "1.2,3", "???")
MONEY_TOKEN_PATTERN = re.compile(r"(?<!\S)[€\-]?[\d?][\d?.,]*(?:€|EUR)?-?(?!\S)", re.IGNORECASE)


@dataclass
class AmountResult:
    """Результат поиска суммы по ключевым словам."""
    amount: Optional[Decimal] = None
    raw: Optional[str] = None
    line_index: int = -1
    method: Optional[str] = None        # keyword | fallback
    invalid_raw: Optional[str] = None   # Токен после ключевого слова, который не разобрался

    def to_dict(self) -> dict:
        return {
            "amount": str(self.amount) if self.amount is not None else None,
            "raw": self.raw,
            "line_index": self.line_index,
            "method": self.method,
            "invalid_raw": self.invalid_raw,
        }


class KeywordAmountExtractor:
    """
    Извлекает итог, промежуточную сумму и налог.

    Все три поля ищутся снизу вверх (итоги в конце чека):
    - total: ключевое слово с начала слова, затем первая сумма > 0 в остатке строки;
      fallback - самая правая положительная сумма последней строки с суммами
    - subtotal / tax: сумма стоит СРАЗУ после ключевого слова
      (допускаются ставка "20%", ":" и "EUR"/"€"), fallback нет
    """

    def __init__(self, table: PatternTable, normalizer: Optional[AmountNormalizer] = None):
        self.table = table
        self.normalizer = normalizer or AmountNormalizer()
        self.adjacent_regexes = {
            kind: self._build_adjacent_regex(kind) for kind in ("subtotal", "tax")
        }

    def _build_adjacent_regex(self, kind: str) -> Optional[re.Pattern]:
        keyword_regex = self.table.keyword_regex(kind)
        if keyword_regex is None:
            return None
        return re.compile(
            keyword_regex.pattern
            + r"[\s:.]*(?:\d{1,2}(?:[.,]\d+)?\s*%)?[\s:]*(?:EUR|€)?[\s:]*"
            + rf"(?P<amount>{AMOUNT_PATTERN})",
            re.IGNORECASE,
        )

    def extract_total(self, lines: List[Line]) -> AmountResult:
        """
        Итоговая сумма.

        Returns:
            AmountResult; invalid_raw заполнен, если строка с ключевым словом
            содержала нераспознаваемую сумму (например "???")
        """
        keyword_regex = self.table.keyword_regex("total")
        invalid_raw = None

        for line in reversed(lines):
            for keyword in keyword_regex.finditer(line.text):
                remainder = line.text[keyword.end():]

                for match in self.normalizer.find_all(remainder):
                    if match.value > 0:
                        logger.debug(
                            f"[TotalExtractor] Итог {match.value} по ключевому слову "
                            f"'{keyword.group(0)}' в строке {line.index}"
                        )
                        return AmountResult(
                            amount=match.value,
                            raw=match.raw,
                            line_index=line.index,
                            method="keyword",
                            invalid_raw=invalid_raw,
                        )

                if invalid_raw is None:
                    invalid_raw = self._find_invalid_token(remainder)
                    if invalid_raw:
                        logger.debug(f"[TotalExtractor] Нераспознанный итог '{invalid_raw}' в строке {line.index}")

        for line in reversed(lines):
            positive = [m for m in self.normalizer.find_all(line.text) if m.value > 0]
            if positive:
                match = positive[-1]
                logger.debug(f"[TotalExtractor] Fallback: итог {match.value} из строки {line.index}")
                return AmountResult(
                    amount=match.value,
                    raw=match.raw,
                    line_index=line.index,
                    method="fallback",
                    invalid_raw=invalid_raw,
                )

        logger.warning("[TotalExtractor] Итоговая сумма не найдена")
        return AmountResult(invalid_raw=invalid_raw)

    def extract_subtotal(self, lines: List[Line]) -> AmountResult:
        return self._extract_adjacent("subtotal", lines)

    def extract_tax(self, lines: List[Line]) -> AmountResult:
        return self._extract_adjacent("tax", lines)

    def _extract_adjacent(self, kind: str, lines: List[Line]) -> AmountResult:
        regex = self.adjacent_regexes.get(kind)
        if regex is None:
            return AmountResult()

        for line in reversed(lines):
            for match in regex.finditer(line.text):
                value = self.normalizer.normalize(match.group("amount"))
                if value is not None and value > 0:
                    logger.debug(f"[TotalExtractor] {kind}={value} в строке {line.index}")
                    return AmountResult(
                        amount=value,
                        raw=match.group("amount"),
                        line_index=line.index,
                        method="keyword",
                    )

        logger.trace(f"[TotalExtractor] {kind} не найден")
        return AmountResult()

    def _find_invalid_token(self, text: str) -> Optional[str]:
        for token in MONEY_TOKEN_PATTERN.finditer(text):
            raw = token.group(0)
            if ("?" in raw or "," in raw) and self.normalizer.normalize(raw) is None:
                return raw
        return None
