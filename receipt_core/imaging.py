"""Утилиты для работы с изображением чека: декодирование, нарезка на полосы, кропы"""
from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from typing import List, Union

from PIL import Image, UnidentifiedImageError

from .exceptions import DecodeError, ExtractionError, InvalidConfiguration
from .models import Band, SourceImage

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"^data:([^;]+);base64,(.+)$", re.DOTALL)

# Режимы, которые PNG умеет сохранять без конвертации
_PNG_MODES = frozenset({"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"})


def decode_payload(payload: Union[bytes, bytearray, str]) -> bytes:
    """
    Получить сырые байты изображения из payload клиента

    Args:
        payload: байты, base64 строка или data URI (data:image/png;base64,...)

    Returns:
        Байты изображения
    """
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)

    base64_data = payload.strip()
    if base64_data.startswith("data:"):
        match = _DATA_URI_RE.match(base64_data)
        if match:
            base64_data = match.group(2)
        else:
            base64_data = base64_data.split(",", 1)[1] if "," in base64_data else ""

    try:
        return base64.b64decode(base64_data, validate=False)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Некорректные base64 данные изображения: {e}") from e


def inspect_image(data: bytes) -> SourceImage:
    """Определить ширину, высоту и формат изображения по байтам"""
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            fmt = (img.format or "").lower()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeError(f"Не удалось распознать формат изображения: {e}") from e

    if width <= 0 or height <= 0:
        raise DecodeError(f"Некорректные размеры изображения: {width}x{height}")

    return SourceImage(data=data, width=width, height=height, format=fmt)


def open_image(source: SourceImage) -> Image.Image:
    """Декодировать исходное изображение целиком (один раз на задачу)"""
    try:
        img = Image.open(io.BytesIO(source.data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeError(f"Не удалось декодировать изображение: {e}") from e
    return img


def plan_bands(height: int, chunk_height: int, overlap: int) -> List[Band]:
    """
    Разбить высоту изображения на перекрывающиеся полосы

    Args:
        height: высота изображения
        chunk_height: максимальная высота полосы
        overlap: перекрытие соседних полос

    Returns:
        Упорядоченный список полос, покрывающий [0, height)
    """
    if chunk_height <= overlap:
        raise InvalidConfiguration(
            f"Высота полосы ({chunk_height}) должна превышать перекрытие ({overlap})"
        )
    if overlap < 0:
        raise InvalidConfiguration(f"Перекрытие не может быть отрицательным: {overlap}")
    if height <= 0:
        raise InvalidConfiguration(f"Некорректная высота изображения: {height}")

    if height <= chunk_height:
        return [Band(index=0, y_offset=0, height=height)]

    bands: List[Band] = []
    step = chunk_height - overlap
    y = 0

    while True:
        band_height = min(chunk_height, height - y)
        bands.append(Band(index=len(bands), y_offset=y, height=band_height))
        logger.debug(f"[OCR] Полоса {len(bands)}: y={y}, height={band_height}")
        if y + band_height >= height:
            break
        y += step

    logger.debug(f"Разделено изображение {height}px на {len(bands)} полос")
    return bands


def extract_band(image: Image.Image, band: Band) -> bytes:
    """Вырезать полосу на всю ширину и перекодировать в самостоятельный PNG"""
    if band.y_offset < 0 or band.height <= 0 or band.y_end > image.height:
        raise ExtractionError(
            f"Полоса {band.index} [{band.y_offset}, {band.y_end}) выходит за границы "
            f"изображения высотой {image.height}px"
        )

    crop = image.crop((0, band.y_offset, image.width, band.y_end))
    if crop.mode not in _PNG_MODES:
        crop = crop.convert("RGB")

    buffer = io.BytesIO()
    crop.save(buffer, format="PNG")
    return buffer.getvalue()
