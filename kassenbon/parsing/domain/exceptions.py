"""
Исключения для домена Parsing.

Только ошибки программы и конфигурации. Проблемы качества данных чека
(нет итога, нет товаров, неизвестный магазин) исключениями НЕ являются:
они попадают в ParsedReceipt.issues.
"""


class ParsingError(Exception):
    """Базовое исключение для ошибок домена Parsing."""

    def __init__(self, message: str, component: str = None, original_error: Exception = None):
        self.message = message
        self.component = component
        self.original_error = original_error
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"Parsing Error: {self.message}"
        if self.component:
            msg += f" (Component: {self.component})"
        if self.original_error:
            msg += f" [Original: {type(self.original_error).__name__}: {str(self.original_error)}]"
        return msg


class ParsingConfigurationError(ParsingError):
    """Ошибка конфигурации домена Parsing."""
    pass


class PatternTableError(ParsingConfigurationError):
    """Таблица паттернов повреждена: нет файла, невалидный regex, нет нужной группы."""
    pass


class ParsingInputError(ParsingError):
    """Вход неверного типа (не последовательность строк OCR)."""
    pass
