"""
DTO контракт: Parsing -> вызывающая сторона (view-model, хранилище, UI)

Структурированный результат разбора одного чека.
Создаётся один раз на вызов парсера и дальше не изменяется.
Сериализация (если нужна) - забота вызывающей стороны: model_dump().
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .issues import ParseIssue
from .ocr_input_dto import BoundingBox


# Порог "приемлемой" уверенности разбора
ACCEPTABLE_CONFIDENCE = 0.6


class LineItem(BaseModel):
    """
    Товарная позиция чека.

    source_line - индекс строки во входной последовательности OcrLine.
    Нужен только для поиска bounding box, владения строкой не подразумевает.
    """

    raw_text: str = Field(..., description="Исходная строка чека")
    name: Optional[str] = Field(None, description="Название товара")
    unit_price: Optional[Decimal] = Field(None, description="Цена за единицу")
    total_price: Decimal = Field(..., description="Итоговая цена позиции")
    quantity: int = Field(1, description="Количество (штук)")
    confidence: float = Field(..., description="Уверенность извлечения (0.0 - 1.0)")
    source_line: int = Field(..., description="Индекс строки во входных данных OCR")
    bounding_box: Optional[BoundingBox] = Field(None, description="Положение строки для подсветки в UI")

    model_config = ConfigDict(frozen=True)

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be >= 1")
        return v

    @field_validator("total_price")
    @classmethod
    def validate_total_price(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Total price must not be negative")
        return v

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("Confidence must be within [0, 1]")
        return v

    @property
    def is_complete(self) -> bool:
        return bool(self.name) and self.total_price is not None


class ParsedReceipt(BaseModel):
    """
    Результат разбора чека.

    confidence всегда в [0.1, 1.0]: ноль зарезервирован за "разбор не выполнялся".
    Пустой items всегда сопровождается критичной проблемой NoItemsFound.
    """

    store_name: Optional[str] = Field(None, description="Название магазина")
    receipt_date: Optional[str] = Field(None, description="Дата чека (DD.MM.YYYY)")
    receipt_time: Optional[str] = Field(None, description="Время чека (HH:MM[:SS])")
    total_amount: Optional[Decimal] = Field(None, description="Итоговая сумма")
    subtotal: Optional[Decimal] = Field(None, description="Промежуточная сумма")
    tax_amount: Optional[Decimal] = Field(None, description="Сумма налога")
    items: List[LineItem] = Field(default_factory=list, description="Товарные позиции")
    confidence: float = Field(..., description="Итоговая уверенность разбора")
    issues: List[ParseIssue] = Field(default_factory=list, description="Проблемы разбора")
    raw_text: str = Field("", description="Очищенный текст чека (строки через перенос)")

    model_config = ConfigDict(frozen=True)

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.1 <= v <= 1.0:
            raise ValueError("Receipt confidence must be within [0.1, 1.0]")
        return v

    @property
    def has_required_fields(self) -> bool:
        return bool(self.store_name) and bool(self.receipt_date) and self.total_amount is not None

    @property
    def has_acceptable_confidence(self) -> bool:
        return self.confidence >= ACCEPTABLE_CONFIDENCE

    @property
    def has_items(self) -> bool:
        return len(self.items) > 0

    @property
    def critical_issue_count(self) -> int:
        return sum(1 for issue in self.issues if issue.is_critical)

    @property
    def items_total(self) -> Decimal:
        return sum((item.total_price for item in self.items), Decimal("0"))
