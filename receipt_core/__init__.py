"""
Receipt Transcriber - Базовая библиотека

Превращает фото или скан чека произвольной высоты в упорядоченный текст
через Google Cloud Vision, нарезая длинные изображения на перекрывающиеся полосы.

Модули:
- imaging: Декодирование, размеры, план полос и кропы (Pillow)
- vision: Клиент Google Vision и разбор ответа
- merger: Склейка текста полос без дублей
- pipeline: Оркестрация single-shot / chunked
"""

from receipt_core.config import ChunkingConfig
from receipt_core.exceptions import (
    DecodeError,
    ExtractionError,
    InvalidConfiguration,
    ProviderConnectionError,
    ProviderError,
    ProviderServerError,
    ProviderTimeoutError,
    ReceiptOCRError,
)
from receipt_core.imaging import decode_payload, extract_band, inspect_image, plan_bands
from receipt_core.merger import merge_band_results
from receipt_core.models import Band, BandResult, SourceImage, TextBlock, Transcript
from receipt_core.pipeline import ReceiptTranscriber
from receipt_core.vision import GoogleVisionClient

__version__ = "0.1"

__all__ = [
    "Band",
    "BandResult",
    "ChunkingConfig",
    "DecodeError",
    "ExtractionError",
    "GoogleVisionClient",
    "InvalidConfiguration",
    "ProviderConnectionError",
    "ProviderError",
    "ProviderServerError",
    "ProviderTimeoutError",
    "ReceiptOCRError",
    "ReceiptTranscriber",
    "SourceImage",
    "TextBlock",
    "Transcript",
    "decode_payload",
    "extract_band",
    "inspect_image",
    "merge_band_results",
    "plan_bands",
]
