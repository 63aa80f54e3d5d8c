"""
DTO контракт: OCR-движок -> Parsing

Входные данные движка извлечения: строки текста, распознанные OCR
(Vision Framework / ML Kit), в порядке сверху вниз.

ВАЖНО: Это внешний контракт. Координаты нормализованы в [0, 1]
относительно размеров исходного изображения.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union


@dataclass(frozen=True)
class BoundingBox:
    """
    Прямоугольник строки на изображении (нормализованные координаты).
    """
    x: float        # Левый верхний угол X
    y: float        # Левый верхний угол Y
    width: float    # Ширина
    height: float   # Высота

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        """Вырожденный прямоугольник (нулевая площадь)."""
        return self.area == 0

    @classmethod
    def empty(cls) -> "BoundingBox":
        """Подстановка, когда строку не удалось сопоставить с OCR-блоком."""
        return cls(x=0.0, y=0.0, width=0.0, height=0.0)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class OcrLine:
    """
    Одна распознанная строка текста.

    Используется для:
    - Извлечения полей чека (магазин, дата, суммы)
    - Сегментации товарных позиций
    - Подсветки найденных позиций в UI (bounding_box)
    """
    text: str                                   # Текст строки как выдал OCR
    confidence: float = 1.0                     # Уверенность OCR (0.0 - 1.0)
    bounding_box: Optional[BoundingBox] = None  # Положение строки на изображении

    @classmethod
    def from_dict(cls, data: dict) -> "OcrLine":
        box = data.get("bounding_box")
        return cls(
            text=data.get("text", ""),
            confidence=float(1.0 if data.get("confidence") is None else data["confidence"]),
            bounding_box=BoundingBox(**box) if box else None,
        )


@dataclass(frozen=True)
class OcrResult:
    """
    Результат работы OCR-движка целиком.

    confidence - общая уверенность движка. Если не задана, парсер оценивает
    её по строкам (среднее минус штраф за нечитаемые строки).
    """
    lines: List[OcrLine] = field(default_factory=list)
    confidence: Optional[float] = None
    language: str = "de"

    @classmethod
    def from_text(cls, text: str, confidence: Optional[float] = None) -> "OcrResult":
        """Собирает результат из сплошного текста (строки через перенос)."""
        return cls(lines=[OcrLine(text=line) for line in text.splitlines()], confidence=confidence)

    @classmethod
    def from_dict(cls, data: dict) -> "OcrResult":
        confidence = data.get("confidence")
        return cls(
            lines=[OcrLine.from_dict(item) if isinstance(item, dict) else OcrLine(text=str(item))
                   for item in data.get("lines", [])],
            confidence=float(confidence) if confidence is not None else None,
            language=data.get("language", "de"),
        )

    @property
    def full_text(self) -> str:
        return "\n".join(line.text for line in self.lines)


# Всё, что принимает парсер на входе
RawLines = Sequence[Union[OcrLine, str]]
