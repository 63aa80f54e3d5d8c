"""
Pattern Table: все распознаватели локали в одной неизменяемой модели.

ЦКП: Загруженная и провалидированная таблица паттернов для локали.

Архитектурный принцип:
- Данные живут в YAML (base.yaml + <locale>/parsing.yaml)
- Локаль наследует списки из base.yaml через "$extends: <ключ>"
- Таблица загружается один раз на локаль и кешируется на процесс
- После загрузки не меняется: безопасно делить между потоками
- with_overrides() создаёт НОВУЮ таблицу, исходная не трогается
"""

import re
import threading
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional, Pattern, Tuple

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator, model_validator

from config import settings
from kassenbon.parsing.domain.exceptions import PatternTableError


# Токены форматов дат -> regex-группы
_DATE_TOKENS = {
    "YYYY": r"(?P<year>\d{4})",
    "YY": r"(?P<year>\d{2})",
    "DD": r"(?P<day>\d{1,2})",
    "MM": r"(?P<month>\d{1,2})",
}
_DATE_SEPARATORS = set(".-/ ")

# Фрагменты в YAML-паттернах: <<price>>, <<name>>, ...
_FRAGMENT_PATTERN = re.compile(r"<<(\w+)>>")


def build_date_regex(date_format: str) -> Pattern:
    """
    Превращает формат вида "DD.MM.YYYY" в regex с группами day/month/year.

    Raises:
        ValueError: Неизвестный токен или не хватает дня/месяца/года
    """
    regex = ""
    seen = set()
    for part in re.split(r"(YYYY|YY|DD|MM)", date_format):
        if not part:
            continue
        if part in _DATE_TOKENS:
            group = "year" if part.startswith("Y") else ("day" if part == "DD" else "month")
            if group in seen:
                raise ValueError(f"Повторный токен '{part}' в формате даты '{date_format}'")
            seen.add(group)
            regex += _DATE_TOKENS[part]
        elif set(part) <= _DATE_SEPARATORS:
            regex += re.escape(part)
        else:
            raise ValueError(f"Неизвестный токен '{part}' в формате даты '{date_format}'")

    if seen != {"day", "month", "year"}:
        raise ValueError(f"Формат даты '{date_format}' должен содержать DD, MM и YY/YYYY")

    return re.compile(rf"(?<!\d){regex}(?!\d)")


def _compile(pattern: str, flags: int = 0) -> Pattern:
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise ValueError(f"Невалидный regex '{pattern}': {e}") from e


def _whole_word_regex(phrase: str) -> Pattern:
    words = [re.escape(w) for w in phrase.split()]
    return re.compile(r"(?<!\w)" + r"\s+".join(words) + r"(?!\w)", re.IGNORECASE)


def _keyword_regex(keywords: Tuple[str, ...]) -> Pattern:
    # Ключевое слово с начала слова: GESAMTSUMME да, ZWISCHENSUMME нет
    alternatives = "|".join(re.escape(k) for k in sorted(keywords, key=len, reverse=True))
    return re.compile(rf"(?<![^\W\d_])(?:{alternatives})", re.IGNORECASE)


class StorePattern(BaseModel):
    """Regex конкретной сети (варианты написания, юридические суффиксы)."""
    model_config = ConfigDict(frozen=True)

    retailer: str
    pattern: str

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v):
        _compile(v)
        return v


class ItemPattern(BaseModel):
    """Паттерн товарной строки с именованными группами."""
    model_config = ConfigDict(frozen=True)

    name: str
    pattern: str

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v):
        compiled = _compile(v)
        if "total" not in compiled.groupindex:
            raise ValueError(f"Паттерн товара без группы 'total': {v}")
        unknown = set(compiled.groupindex) - {"quantity", "name", "unit_price", "total"}
        if unknown:
            raise ValueError(f"Неизвестные группы {sorted(unknown)} в паттерне товара: {v}")
        return v


class PatternTable(BaseModel):
    """
    Неизменяемая таблица распознавателей для одной локали.

    Порядок элементов в списках = приоритет (первое совпадение выигрывает).
    Скомпилированные regex хранятся в приватных атрибутах и строятся один раз.
    """
    model_config = ConfigDict(frozen=True)

    locale_code: str = Field(..., description="Код локали (de_AT, de_DE)")
    currency: str = Field(default="EUR", description="ISO код валюты")

    # Магазин
    known_retailers: Tuple[str, ...] = Field(..., description="Известные сети (UPPERCASE)")
    store_patterns: Tuple[StorePattern, ...] = Field(default=())
    generic_store_pattern: str

    # Дата и время
    date_formats: Tuple[str, ...]
    time_pattern: str

    # Суммы
    total_keywords: Tuple[str, ...]
    subtotal_keywords: Tuple[str, ...] = Field(default=())
    tax_keywords: Tuple[str, ...] = Field(default=())

    # Товары
    skip_keywords: Tuple[str, ...] = Field(default=())
    item_patterns: Tuple[ItemPattern, ...]

    # Числовые параметры
    store_scan_limit: int = Field(default=settings.STORE_SCAN_LIMIT, ge=1)
    sum_mismatch_tolerance: float = Field(default=settings.SUM_MISMATCH_TOLERANCE)
    header_line_count: int = Field(default=settings.HEADER_LINE_COUNT, ge=0)
    footer_line_count: int = Field(default=settings.FOOTER_LINE_COUNT, ge=0)
    short_receipt_threshold: int = Field(default=settings.SHORT_RECEIPT_THRESHOLD, ge=0)
    short_header_line_count: int = Field(default=settings.SHORT_HEADER_LINE_COUNT, ge=0)
    short_footer_line_count: int = Field(default=settings.SHORT_FOOTER_LINE_COUNT, ge=0)
    bbox_max_distance: int = Field(default=settings.BBOX_MAX_DISTANCE, ge=0)

    # Скомпилированные паттерны
    _retailer_regexes: List[Tuple[str, Pattern]] = PrivateAttr(default_factory=list)
    _store_regexes: List[Tuple[str, Pattern]] = PrivateAttr(default_factory=list)
    _generic_store_regex: Optional[Pattern] = PrivateAttr(default=None)
    _date_regexes: List[Tuple[str, Pattern]] = PrivateAttr(default_factory=list)
    _time_regex: Optional[Pattern] = PrivateAttr(default=None)
    _item_regexes: List[Tuple[str, Pattern]] = PrivateAttr(default_factory=list)
    _keyword_regexes: Dict[str, Pattern] = PrivateAttr(default_factory=dict)

    # Кеш загруженных локалей
    _cache: ClassVar[Dict[str, "PatternTable"]] = {}
    _cache_lock: ClassVar[threading.Lock] = threading.Lock()
    _config_dir: ClassVar[Path] = settings.LOCALES_DIR

    @field_validator(
        "known_retailers", "total_keywords", "subtotal_keywords",
        "tax_keywords", "skip_keywords",
    )
    @classmethod
    def normalize_keywords(cls, v):
        """Ключевые слова хранятся в UPPERCASE, пустые отбрасываются."""
        return tuple(str(k).upper() for k in v if str(k).strip())

    @field_validator("date_formats")
    @classmethod
    def validate_date_formats(cls, v):
        if not v:
            raise ValueError("date_formats не может быть пустым")
        for date_format in v:
            build_date_regex(date_format)
        return v

    @field_validator("generic_store_pattern", "time_pattern")
    @classmethod
    def validate_regex(cls, v):
        _compile(v)
        return v

    @field_validator("total_keywords", "item_patterns")
    @classmethod
    def validate_not_empty(cls, v, info):
        if not v:
            raise ValueError(f"{info.field_name} не может быть пустым")
        return v

    @field_validator("sum_mismatch_tolerance")
    @classmethod
    def validate_tolerance(cls, v):
        if not 0 < v <= 1:
            raise ValueError(f"sum_mismatch_tolerance должен быть в (0, 1], получено: {v}")
        return v

    @model_validator(mode="after")
    def validate_time_groups(self):
        groups = _compile(self.time_pattern).groupindex
        if "hour" not in groups or "minute" not in groups:
            raise ValueError("time_pattern должен содержать группы 'hour' и 'minute'")
        return self

    def model_post_init(self, __context: Any) -> None:
        self._retailer_regexes = [(r, _whole_word_regex(r)) for r in self.known_retailers]
        self._store_regexes = [
            (p.retailer.upper(), re.compile(p.pattern, re.IGNORECASE)) for p in self.store_patterns
        ]
        self._generic_store_regex = re.compile(self.generic_store_pattern)
        self._date_regexes = [(f, build_date_regex(f)) for f in self.date_formats]
        self._time_regex = re.compile(self.time_pattern)
        self._item_regexes = [(p.name, re.compile(p.pattern)) for p in self.item_patterns]
        self._keyword_regexes = {
            "total": _keyword_regex(self.total_keywords),
        }
        if self.subtotal_keywords:
            self._keyword_regexes["subtotal"] = _keyword_regex(self.subtotal_keywords)
        if self.tax_keywords:
            self._keyword_regexes["tax"] = _keyword_regex(self.tax_keywords)

    # === Скомпилированные распознаватели ===

    @property
    def retailer_regexes(self) -> List[Tuple[str, Pattern]]:
        return self._retailer_regexes

    @property
    def store_regexes(self) -> List[Tuple[str, Pattern]]:
        return self._store_regexes

    @property
    def generic_store_regex(self) -> Pattern:
        return self._generic_store_regex

    @property
    def date_regexes(self) -> List[Tuple[str, Pattern]]:
        return self._date_regexes

    @property
    def time_regex(self) -> Pattern:
        return self._time_regex

    @property
    def item_regexes(self) -> List[Tuple[str, Pattern]]:
        return self._item_regexes

    def keyword_regex(self, kind: str) -> Optional[Pattern]:
        """Regex ключевых слов суммы: 'total', 'subtotal' или 'tax' (None если слов нет)."""
        return self._keyword_regexes.get(kind)

    def is_known_retailer(self, store_name: Optional[str]) -> bool:
        """
        Известна ли сеть: совпадение целого слова или вхождение без пробелов
        ("MEDIA MARKT" -> MEDIAMARKT) для названий от 5 символов.
        """
        if not store_name:
            return False
        compact = re.sub(r"[\s\-]+", "", store_name.upper())
        for retailer, regex in self._retailer_regexes:
            if regex.search(store_name):
                return True
            if len(retailer) >= settings.STORE_FUZZY_MIN_LENGTH and retailer.replace(" ", "") in compact:
                return True
        return False

    def is_skip_line(self, text: str) -> bool:
        """Содержит ли строка служебное ключевое слово (без учёта регистра)."""
        upper = text.upper()
        return any(keyword in upper for keyword in self.skip_keywords)

    def with_overrides(self, **options) -> "PatternTable":
        """
        Новая таблица с заменёнными полями (known_retailers, date_formats,
        ключевые слова, sum_mismatch_tolerance, header/footer counts, ...).

        Raises:
            PatternTableError: Неизвестный параметр или невалидное значение
        """
        if not options:
            return self

        unknown = set(options) - set(type(self).model_fields)
        if unknown:
            raise PatternTableError(
                f"Неизвестные параметры таблицы: {sorted(unknown)}",
                component="PatternTable",
            )

        data = self.model_dump()
        data.update(options)
        try:
            table = PatternTable.model_validate(data)
        except ValidationError as e:
            raise PatternTableError(
                f"Невалидные переопределения для {self.locale_code}",
                component="PatternTable",
                original_error=e,
            ) from e

        logger.debug(f"[PatternTable] Переопределены поля {sorted(options)} для {self.locale_code}")
        return table

    # === Загрузка из YAML ===

    @classmethod
    def load(cls, locale_code: Optional[str] = None) -> "PatternTable":
        """
        Загружает таблицу локали (из кеша, если уже загружена).

        Args:
            locale_code: Код локали; None = DEFAULT_LOCALE (с откатом на FALLBACK_LOCALE)

        Raises:
            PatternTableError: Нет файла локали или таблица повреждена
        """
        if locale_code is None:
            locale_code = settings.DEFAULT_LOCALE
            if not (Path(cls._config_dir) / locale_code / "parsing.yaml").exists():
                logger.warning(
                    f"[PatternTable] Дефолтная локаль {locale_code} не найдена, "
                    f"используем {settings.FALLBACK_LOCALE}"
                )
                locale_code = settings.FALLBACK_LOCALE

        with cls._cache_lock:
            if locale_code in cls._cache:
                return cls._cache[locale_code]

            table = cls._load_locale_yaml(Path(cls._config_dir), locale_code)
            cls._cache[locale_code] = table

        logger.debug(
            f"[PatternTable] Загружена таблица {locale_code}: "
            f"{len(table.known_retailers)} сетей, "
            f"{len(table.item_patterns)} паттернов товаров, "
            f"{len(table.skip_keywords)} skip_keywords"
        )
        return table

    @classmethod
    def clear_cache(cls) -> None:
        with cls._cache_lock:
            cls._cache.clear()

    @classmethod
    def _read_yaml(cls, path: Path) -> dict:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise PatternTableError(f"Невалидный YAML: {path}", component="PatternTable", original_error=e) from e
        if not isinstance(data, dict):
            raise PatternTableError(f"Ожидался словарь в {path}", component="PatternTable")
        return data

    @classmethod
    def _resolve_extends(cls, value: Any, base_config: dict) -> Any:
        """
        Раскрывает наследование списков через $extends.

        Поддерживает форматы:
        - Строка: "$extends: key"
        - Словарь: {"$extends": "key"} (YAML без кавычек)
        """
        if not isinstance(value, list):
            return value

        result = []
        for item in value:
            extended_key = None
            if isinstance(item, str) and item.startswith("$extends:"):
                extended_key = item.split(":", 1)[1].strip()
            elif isinstance(item, dict) and "$extends" in item:
                extended_key = item["$extends"]

            if extended_key is None:
                result.append(item)
                continue

            extended = base_config.get(extended_key)
            if not isinstance(extended, list):
                raise PatternTableError(
                    f"Ключ '{extended_key}' для $extends не найден в base.yaml",
                    component="PatternTable",
                )
            logger.trace(f"[PatternTable] Наследуем {len(extended)} элементов из '{extended_key}'")
            result.extend(extended)
        return result

    @classmethod
    def _expand_fragments(cls, pattern: str, fragments: Dict[str, str]) -> str:
        def replace(match):
            name = match.group(1)
            if name not in fragments:
                raise PatternTableError(f"Неизвестный фрагмент <<{name}>>", component="PatternTable")
            return fragments[name]

        return _FRAGMENT_PATTERN.sub(replace, pattern)

    @classmethod
    def _load_locale_yaml(cls, config_dir: Path, locale_code: str) -> "PatternTable":
        base_file = config_dir / "base.yaml"
        base_config = cls._read_yaml(base_file) if base_file.exists() else {}

        config_file = config_dir / locale_code / "parsing.yaml"
        if not config_file.exists():
            raise PatternTableError(
                f"Конфиг для {locale_code} не найден: {config_file}",
                component="PatternTable",
            )
        config_data = cls._read_yaml(config_file)

        fragments = {**base_config.get("fragments", {}), **config_data.get("fragments", {})}

        data: Dict[str, Any] = {"locale_code": config_data.get("locale_code", locale_code)}
        for field_name in cls.model_fields:
            if field_name == "locale_code":
                continue
            if field_name in config_data:
                data[field_name] = cls._resolve_extends(config_data[field_name], base_config)
            elif field_name in ("generic_store_pattern", "time_pattern") and field_name in base_config:
                data[field_name] = base_config[field_name]

        for key in ("store_patterns", "item_patterns"):
            data[key] = [
                {**entry, "pattern": cls._expand_fragments(entry.get("pattern", ""), fragments)}
                if isinstance(entry, dict) else entry
                for entry in data.get(key, [])
            ]

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise PatternTableError(
                f"Таблица паттернов {locale_code} повреждена",
                component="PatternTable",
                original_error=e,
            ) from e
