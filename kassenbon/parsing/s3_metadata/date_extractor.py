from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from loguru import logger

from kassenbon.parsing.locales.pattern_table import PatternTable
from kassenbon.parsing.s1_preprocess.stage import Line


@dataclass
class DateResult:
    """Результат извлечения даты."""
    date: Optional[str] = None      # DD.MM.YYYY
    raw: Optional[str] = None
    line_index: int = -1
    date_format: Optional[str] = None


@dataclass
class TimeResult:
    """Результат извлечения времени."""
    time: Optional[str] = None      # HH:MM или HH:MM:SS
    raw: Optional[str] = None
    line_index: int = -1


class DateExtractor:
    """
    Извлекает дату и время чека.

    Строки просматриваются сверху вниз, в каждой строке форматы
    пробуются в порядке таблицы. Невозможные даты (31.02.) пропускаются.
    """

    def __init__(self, table: PatternTable):
        self.table = table

    def extract_date(self, lines: List[Line]) -> DateResult:
        for line in lines:
            for date_format, regex in self.table.date_regexes:
                for match in regex.finditer(line.text):
                    normalized = self._normalize(match)
                    if normalized:
                        logger.debug(
                            f"[DateExtractor] Дата {normalized} ({date_format}) в строке {line.index}"
                        )
                        return DateResult(
                            date=normalized,
                            raw=match.group(0),
                            line_index=line.index,
                            date_format=date_format,
                        )
                    logger.trace(f"[DateExtractor] Невалидная дата '{match.group(0)}'")

        logger.warning("[DateExtractor] Дата не найдена")
        return DateResult()

    def extract_time(self, lines: List[Line]) -> TimeResult:
        for line in lines:
            match = self.table.time_regex.search(line.text)
            if not match:
                continue
            time_text = f"{int(match.group('hour')):02d}:{match.group('minute')}"
            if match.groupdict().get("second"):
                time_text += f":{match.group('second')}"
            logger.debug(f"[DateExtractor] Время {time_text} в строке {line.index}")
            return TimeResult(time=time_text, raw=match.group(0), line_index=line.index)

        logger.debug("[DateExtractor] Время не найдено")
        return TimeResult()

    def _normalize(self, match) -> Optional[str]:
        """Проверяет календарную дату и приводит к DD.MM.YYYY (YY -> 20YY)."""
        try:
            day, month, year = int(match.group("day")), int(match.group("month")), int(match.group("year"))
            if len(match.group("year")) == 2:
                year += 2000
            parsed = date(year, month, day)
        except (ValueError, IndexError, TypeError):
            return None
        return f"{parsed.day:02d}.{parsed.month:02d}.{parsed.year:04d}"
