"""
Проблемы парсинга (ParseIssue).

Ожидаемые проблемы качества данных, а не ошибки программы: движок никогда
не бросает исключение из-за плохого чека, а записывает проблему в результат.

Каждый вариант помечен флагом is_critical:
- критичные -> попросить пользователя пересканировать или исправить вручную
- некритичные -> показать чек, но пометить поле для проверки
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _Issue(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_critical: bool = False

    @property
    def message(self) -> str:
        raise NotImplementedError

    @property
    def user_message(self) -> str:
        raise NotImplementedError


class MissingRequiredField(_Issue):
    """Не удалось извлечь обязательное поле (store_name, receipt_date, total_amount)."""
    code: Literal["MISSING_REQUIRED_FIELD"] = "MISSING_REQUIRED_FIELD"
    field_name: str

    @property
    def message(self) -> str:
        return f"Required field '{self.field_name}' missing"

    @property
    def user_message(self) -> str:
        return f"Pflichtfeld '{self.field_name}' konnte nicht erkannt werden."


class InvalidCurrencyFormat(_Issue):
    """Итоговая сумма найдена, но не нормализуется в число."""
    code: Literal["INVALID_CURRENCY_FORMAT"] = "INVALID_CURRENCY_FORMAT"
    raw: str

    @property
    def message(self) -> str:
        return f"Invalid currency format: {self.raw}"

    @property
    def user_message(self) -> str:
        return f"Ungültiges Währungsformat: {self.raw}"


class NoItemsFound(_Issue):
    code: Literal["NO_ITEMS_FOUND"] = "NO_ITEMS_FOUND"
    is_critical: bool = True

    @property
    def message(self) -> str:
        return "No purchase items found"

    @property
    def user_message(self) -> str:
        return "Keine Artikel im Kassenbon gefunden."


class ValidationFailed(_Issue):
    """Перекрёстная проверка не прошла (detail: имя проверки, например 'itemSum')."""
    code: Literal["VALIDATION_FAILED"] = "VALIDATION_FAILED"
    detail: str

    @property
    def message(self) -> str:
        return f"Receipt validation failed: {self.detail}"

    @property
    def user_message(self) -> str:
        return "Kassenbon-Validierung fehlgeschlagen."


class UnknownStore(_Issue):
    """Название магазина найдено, но его нет в списке известных сетей."""
    code: Literal["UNKNOWN_STORE"] = "UNKNOWN_STORE"
    store_name: str

    @property
    def message(self) -> str:
        return f"Unknown store: {self.store_name}"

    @property
    def user_message(self) -> str:
        return f"Unbekanntes Geschäft: {self.store_name}"


ParseIssue = Annotated[
    Union[MissingRequiredField, InvalidCurrencyFormat, NoItemsFound, ValidationFailed, UnknownStore],
    Field(discriminator="code"),
]
