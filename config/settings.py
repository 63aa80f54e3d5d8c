"""
Настройки движка разбора чеков Kassenbon.

Значения по умолчанию для всех этапов. Локале-специфичные данные
(ключевые слова, сети магазинов, паттерны) лежат в YAML рядом с
kassenbon/parsing/locales/ и могут переопределять часть этих значений.
"""

import os
from pathlib import Path

# =============================================================================
# ПУТИ ПРОЕКТА
# =============================================================================
PROJECT_ROOT = Path(__file__).parent.parent
LOCALES_DIR = PROJECT_ROOT / "kassenbon" / "parsing" / "locales"

# =============================================================================
# ЛОГИРОВАНИЕ
# =============================================================================
# Уровень логов для скриптов (библиотека сама handlers не настраивает)
LOG_LEVEL = os.getenv("KASSENBON_LOG_LEVEL", "INFO")

# =============================================================================
# НАСТРОЙКИ ЛОКАЛИ
# =============================================================================
# Дефолтная локаль (австрийские и немецкие сети)
DEFAULT_LOCALE = "de_AT"

# Фолбэк-локаль, если конфигурации дефолтной нет
FALLBACK_LOCALE = "de_DE"

# =============================================================================
# НАСТРОЙКИ METADATA / EXTRACTION
# =============================================================================
# Сколько первых строк просматривать в поисках магазина
STORE_SCAN_LIMIT = 5

# Минимальная длина названия из generic-паттерна
MIN_STORE_NAME_LENGTH = 4

# Fuzzy-совпадение с известной сетью: макс. расстояние и мин. длина названия
STORE_FUZZY_MAX_DISTANCE = 1
STORE_FUZZY_MIN_LENGTH = 5

# =============================================================================
# НАСТРОЙКИ ТОВАРНОЙ ЗОНЫ
# =============================================================================
# Длинные чеки: отбрасываем шапку (магазин/дата) и подвал (итоги)
HEADER_LINE_COUNT = 3
FOOTER_LINE_COUNT = 5

# Короткие чеки (<= SHORT_RECEIPT_THRESHOLD строк)
SHORT_RECEIPT_THRESHOLD = 10
SHORT_HEADER_LINE_COUNT = 1
SHORT_FOOTER_LINE_COUNT = 2

# =============================================================================
# НАСТРОЙКИ ВАЛИДАЦИИ И CONFIDENCE
# =============================================================================
# Допустимое расхождение суммы товаров и итога (доля от итога)
SUM_MISMATCH_TOLERANCE = 0.20

# Штрафы и бонусы confidence
CRITICAL_ISSUE_PENALTY = 0.25
ISSUE_PENALTY = 0.10
ITEMS_FOUND_BONUS = 0.10
MANY_ITEMS_BONUS = 0.05
MANY_ITEMS_THRESHOLD = 3

# Оценка уверенности без данных движка: штраф за каждую строку с нечитаемыми
# символами ("???", U+FFFD)
UNREADABLE_LINE_PENALTY = 0.25

# Границы итоговой уверенности (0.0 зарезервирован за "не разбирали")
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 1.0

# =============================================================================
# НАСТРОЙКИ BOUNDING BOX
# =============================================================================
# Максимальное расстояние Левенштейна (строго меньше) для fuzzy-сопоставления
BBOX_MAX_DISTANCE = 3

# Строка OCR короче этого не считается куском текста позиции (шум вроде "A")
BBOX_MIN_FRAGMENT_LENGTH = 4

# =============================================================================
# ПАРАЛЛЕЛЬНАЯ ОБРАБОТКА
# =============================================================================
BATCH_MAX_WORKERS = 4
