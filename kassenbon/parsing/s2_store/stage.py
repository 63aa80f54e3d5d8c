"""
Stage 2: Store Detection

ЦКП: Название магазина из шапки чека.

Input: PreprocessResult.lines, PatternTable
Output: StoreResult(store_name, matched_in_line, method)

Алгоритм (первые STORE_SCAN_LIMIT строк):
1. По каждой строке: известная сеть (целое слово или fuzzy с расстоянием 1),
   затем regex конкретных сетей (суффиксы GmbH/KG, варианты написания)
2. Если сеть не нашлась: generic-паттерн "похоже на название фирмы"
   по тем же строкам (строки со служебными словами пропускаются)

Известное ограничение: если адрес стоит выше названия и похож на
название, generic-паттерн возьмёт адрес.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from Levenshtein import distance
from loguru import logger

from config.settings import MIN_STORE_NAME_LENGTH, STORE_FUZZY_MAX_DISTANCE, STORE_FUZZY_MIN_LENGTH
from kassenbon.parsing.locales.pattern_table import PatternTable
from kassenbon.parsing.s1_preprocess.stage import Line


@dataclass
class StoreResult:
    """
    Результат Stage 2: Store Detection.
    """
    store_name: Optional[str] = None
    matched_in_line: int = -1       # Индекс строки во входных данных
    method: Optional[str] = None    # known_retailer | fuzzy | store_pattern | generic

    def to_dict(self) -> dict:
        return {
            "store_name": self.store_name,
            "matched_in_line": self.matched_in_line,
            "method": self.method,
        }


def format_store_name(name: str) -> str:
    """
    Приводит название к виду для показа: пробелы схлопнуты,
    слова капсом ("MERKUR", "REWE") не трогаем, остальные с заглавной.
    """
    words = []
    for word in name.split():
        if len(word) > 1 and word.isupper():
            words.append(word)
        else:
            words.append(word[:1].upper() + word[1:].lower())
    return " ".join(words)


class StoreStage:
    """
    Stage 2: Store Detection.

    ЦКП: Название магазина по таблице паттернов локали.
    """

    TOKEN_PATTERN = re.compile(r"[^\W\d_]+(?:&[^\W\d_]+)?")

    def __init__(self, table: PatternTable):
        self.table = table

    def process(self, lines: List[Line]) -> StoreResult:
        """
        Ищет магазин в первых строках чека.

        Args:
            lines: Очищенные строки (Stage 1)

        Returns:
            StoreResult (store_name=None, если ничего не нашлось)
        """
        window = lines[:self.table.store_scan_limit]

        for line in window:
            result = self._match_retailer(line)
            if result:
                return result

        for line in window:
            result = self._match_generic(line)
            if result:
                return result

        logger.warning("[StoreStage] Не удалось определить название магазина")
        return StoreResult()

    def _match_retailer(self, line: Line) -> Optional[StoreResult]:
        for retailer, regex in self.table.retailer_regexes:
            if regex.search(line.text):
                logger.debug(f"[StoreStage] Известная сеть '{retailer}' в строке {line.index}: '{line.text}'")
                return StoreResult(store_name=retailer, matched_in_line=line.index, method="known_retailer")

        fuzzy = self._match_fuzzy(line.text)
        if fuzzy:
            logger.debug(f"[StoreStage] Fuzzy-совпадение '{fuzzy}' в строке {line.index}: '{line.text}'")
            return StoreResult(store_name=fuzzy, matched_in_line=line.index, method="fuzzy")

        for retailer, regex in self.table.store_regexes:
            if regex.search(line.text):
                logger.debug(f"[StoreStage] Паттерн сети '{retailer}' в строке {line.index}: '{line.text}'")
                return StoreResult(store_name=retailer, matched_in_line=line.index, method="store_pattern")

        return None

    def _match_fuzzy(self, text: str) -> Optional[str]:
        """Одно слово строки отличается от названия сети (>= 5 букв) не больше чем на 1 символ."""
        tokens = [t for t in self.TOKEN_PATTERN.findall(text.upper()) if len(t) >= STORE_FUZZY_MIN_LENGTH - 1]
        for retailer, _ in self.table.retailer_regexes:
            if len(retailer) < STORE_FUZZY_MIN_LENGTH or " " in retailer:
                continue
            for token in tokens:
                if distance(token, retailer) <= STORE_FUZZY_MAX_DISTANCE:
                    return retailer
        return None

    def _match_generic(self, line: Line) -> Optional[StoreResult]:
        if self.table.is_skip_line(line.text):
            logger.trace(f"[StoreStage] Служебная строка, пропуск: '{line.text}'")
            return None

        match = self.table.generic_store_regex.match(line.text)
        if not match:
            return None

        candidate = match.group(0).strip(" .-&'")
        if len(candidate) < MIN_STORE_NAME_LENGTH or not candidate[0].isupper():
            return None

        store_name = format_store_name(candidate)
        logger.debug(f"[StoreStage] Generic-название '{store_name}' в строке {line.index}")
        return StoreResult(store_name=store_name, matched_in_line=line.index, method="generic")
