"""
Domain слой домена Parsing.

Содержит интерфейсы (абстрактные классы) и исключения для Parsing домена.
"""

from .interfaces import (
    IReceiptParser,
    IParsingPipeline,
)

from .exceptions import (
    ParsingError,
    ParsingConfigurationError,
    PatternTableError,
    ParsingInputError,
)

__all__ = [
    # Интерфейсы
    "IReceiptParser",
    "IParsingPipeline",

    # Исключения
    "ParsingError",
    "ParsingConfigurationError",
    "PatternTableError",
    "ParsingInputError",
]
