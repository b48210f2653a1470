"""Пороги нарезки изображения на полосы"""
from __future__ import annotations

import os
from dataclasses import dataclass

from .exceptions import InvalidConfiguration


@dataclass(frozen=True)
class ChunkingConfig:
    """Настройки нарезки длинных чеков"""
    # Максимальная высота изображения для одного запроса к OCR
    single_shot_max_height: int = int(os.getenv("OCR_SINGLE_SHOT_MAX_HEIGHT", "3000"))

    # Высота полосы и перекрытие соседних полос (px)
    chunk_height: int = int(os.getenv("OCR_CHUNK_HEIGHT", "3000"))
    overlap: int = int(os.getenv("OCR_CHUNK_OVERLAP", "300"))

    # Количество параллельных запросов OCR внутри одной задачи (1 = последовательно)
    max_workers: int = int(os.getenv("OCR_MAX_WORKERS", "1"))

    def validate(self) -> "ChunkingConfig":
        if self.chunk_height <= 0:
            raise InvalidConfiguration(f"Высота полосы должна быть положительной: {self.chunk_height}")
        if self.overlap < 0:
            raise InvalidConfiguration(f"Перекрытие не может быть отрицательным: {self.overlap}")
        if self.chunk_height <= self.overlap:
            raise InvalidConfiguration(
                f"Высота полосы ({self.chunk_height}) должна превышать перекрытие ({self.overlap})"
            )
        if self.single_shot_max_height <= 0:
            raise InvalidConfiguration(
                f"Порог single-shot должен быть положительным: {self.single_shot_max_height}"
            )
        if self.max_workers < 1:
            raise InvalidConfiguration(f"max_workers должен быть >= 1: {self.max_workers}")
        return self
