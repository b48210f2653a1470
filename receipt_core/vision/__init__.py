"""Google Vision клиент и разбор ответа."""
from .client import DEFAULT_ENDPOINT, GoogleVisionClient
from .parser import ParsedText, extract_block_text, parse_annotation

__all__ = [
    "DEFAULT_ENDPOINT",
    "GoogleVisionClient",
    "ParsedText",
    "extract_block_text",
    "parse_annotation",
]
