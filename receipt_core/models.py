"""Модели данных движка нарезки и склейки OCR."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class SourceImage:
    """Исходное изображение чека с определёнными размерами."""

    data: bytes = field(repr=False)
    width: int
    height: int
    format: str = ""

    @property
    def dimensions(self) -> dict:
        return {"width": self.width, "height": self.height, "format": self.format}


@dataclass(frozen=True)
class Band:
    """Горизонтальная полоса исходного изображения."""

    index: int
    y_offset: int
    height: int

    @property
    def y_end(self) -> int:
        return self.y_offset + self.height


@dataclass(frozen=True)
class TextBlock:
    """Блок текста (абзац/регион) с вертикальными координатами."""

    text: str
    min_y: int
    max_y: int

    def translate(self, y_offset: int) -> "TextBlock":
        """Перевести локальные координаты полосы в координаты всего изображения."""
        return TextBlock(
            text=self.text,
            min_y=self.min_y + y_offset,
            max_y=self.max_y + y_offset,
        )


@dataclass
class BandResult:
    """Результат OCR одной полосы."""

    band_index: int
    y_offset: int
    height: int
    text: str = ""
    blocks: List[TextBlock] = field(default_factory=list)

    @classmethod
    def empty(cls, band: Band) -> "BandResult":
        """Пустой результат (полоса, на которой провайдер вернул ошибку)."""
        return cls(band_index=band.index, y_offset=band.y_offset, height=band.height)

    @property
    def global_blocks(self) -> List[TextBlock]:
        return [block.translate(self.y_offset) for block in self.blocks]


@dataclass(frozen=True)
class Transcript:
    """Итоговая расшифровка чека."""

    text: str
    width: int
    height: int
    format: str
    chunked: bool
    blocks: List[TextBlock] = field(default_factory=list)
    failed_bands: List[int] = field(default_factory=list)

    @property
    def lines(self) -> List[str]:
        return self.text.split("\n") if self.text else []

    @property
    def dimensions(self) -> dict:
        return {"width": self.width, "height": self.height, "format": self.format}

    def to_dict(self) -> dict:
        """Представление для ответа API."""
        return {
            "text": self.text,
            "dimensions": self.dimensions,
            "chunked": self.chunked,
        }
