"""HTTP клиент для Google Cloud Vision (images:annotate)."""
from __future__ import annotations

import base64
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from ..exceptions import (
    InvalidConfiguration,
    ProviderConnectionError,
    ProviderError,
    ProviderServerError,
    ProviderTimeoutError,
)
from ..models import Band, BandResult
from .parser import parse_annotation

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://vision.googleapis.com/v1/images:annotate"
FEATURE_TYPE = "DOCUMENT_TEXT_DETECTION"

# Глобальный HTTP клиент с connection pooling
_http_client: httpx.Client | None = None
_client_timeout: float | None = None


def _get_http_client(timeout: float) -> httpx.Client:
    """Получить или создать HTTP клиент с connection pooling."""
    global _http_client, _client_timeout

    if _http_client is None or _client_timeout != timeout:
        if _http_client is not None:
            try:
                _http_client.close()
            except httpx.HTTPError:
                pass

        _http_client = httpx.Client(
            limits=httpx.Limits(max_connections=5, max_keepalive_connections=2),
            timeout=timeout,
        )
        _client_timeout = timeout
        logger.debug(f"Создан HTTP клиент для Google Vision (timeout={timeout}s)")

    return _http_client


def _error_message(error: object) -> str:
    """Сообщение из поля error: объект {"message": ...} или строка."""
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str):
        return error
    return "Google Vision API error"


@dataclass
class GoogleVisionClient:
    """Клиент распознавания текста документа через Google Cloud Vision."""

    api_key: str = field(default_factory=lambda: os.getenv("GOOGLE_VISION_API_KEY", ""))
    endpoint: str = field(
        default_factory=lambda: os.getenv("GOOGLE_VISION_ENDPOINT", DEFAULT_ENDPOINT)
    )
    timeout: float = field(
        default_factory=lambda: float(os.getenv("GOOGLE_VISION_TIMEOUT", "120"))
    )
    language_hints: List[str] = field(default_factory=lambda: ["en"])
    http_client: Optional[httpx.Client] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.api_key:
            raise InvalidConfiguration("GOOGLE_VISION_API_KEY not configured")

    def build_request(self, content: bytes, max_results: Optional[int] = None) -> dict:
        """Сформировать тело запроса images:annotate для одного изображения."""
        feature: dict = {"type": FEATURE_TYPE}
        if max_results is not None:
            feature["maxResults"] = max_results

        return {
            "requests": [
                {
                    "image": {"content": base64.b64encode(content).decode("ascii")},
                    "features": [feature],
                    "imageContext": {"languageHints": list(self.language_hints)},
                }
            ]
        }

    def annotate(self, content: bytes, max_results: Optional[int] = None) -> dict:
        """
        Отправить изображение в Google Vision и вернуть первый элемент responses[].

        Args:
            content: Байты изображения (PNG/JPEG)
            max_results: Ограничение maxResults для признака (опционально)

        Returns:
            dict аннотации (fullTextAnnotation / textAnnotations)

        Raises:
            ProviderConnectionError: Сервис недоступен
            ProviderTimeoutError: Превышено время ожидания
            ProviderServerError: Ошибка сервера (5xx)
            ProviderError: Сервис вернул ошибку
        """
        client = self.http_client or _get_http_client(self.timeout)
        payload = self.build_request(content, max_results=max_results)

        logger.debug(f"Отправка запроса OCR: {len(content)} байт, timeout={self.timeout}s")

        try:
            response = client.post(
                self.endpoint,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )

            if response.status_code >= 500:
                raise ProviderServerError(self._extract_error(response), response.status_code)

            if response.status_code >= 400:
                raise ProviderError(self._extract_error(response), response.status_code)

            try:
                data = response.json()
            except ValueError as e:
                raise ProviderError(f"Некорректный ответ Google Vision: {e}") from e

            if not isinstance(data, dict):
                raise ProviderError("Некорректный ответ Google Vision: ожидался JSON объект")

            if data.get("error"):
                raise ProviderError(_error_message(data["error"]), response.status_code)

            responses = data.get("responses") or []
            if not isinstance(responses, list):
                raise ProviderError("Некорректный ответ Google Vision: responses не является списком")
            annotation = responses[0] if responses else {}
            if not isinstance(annotation, dict):
                raise ProviderError("Некорректный ответ Google Vision: пустой элемент responses")

            if annotation.get("error"):
                raise ProviderError(_error_message(annotation["error"]), response.status_code)

            return annotation

        except httpx.ConnectError as e:
            logger.error(f"Ошибка подключения к Google Vision: {e}")
            raise ProviderConnectionError(f"Google Vision недоступен: {self.endpoint}") from e

        except httpx.TimeoutException as e:
            logger.error(f"Таймаут запроса Google Vision: {e}")
            raise ProviderTimeoutError(f"Превышено время ожидания ({self.timeout}s)") from e

        except ProviderError:
            raise

        except Exception as e:
            logger.error(f"Неожиданная ошибка запроса OCR: {e}", exc_info=True)
            raise ProviderError(f"Ошибка запроса OCR: {e}") from e

    def detect(self, pixels: bytes, band: Band, max_results: Optional[int] = None) -> BandResult:
        """Распознать текст полосы и вернуть BandResult в локальных координатах полосы."""
        annotation = self.annotate(pixels, max_results=max_results)
        try:
            parsed = parse_annotation(annotation)
        except Exception as e:
            logger.error(f"Не удалось разобрать ответ Google Vision: {e}", exc_info=True)
            raise ProviderError(f"Некорректный ответ Google Vision: {e}") from e
        return BandResult(
            band_index=band.index,
            y_offset=band.y_offset,
            height=band.height,
            text=parsed.text,
            blocks=parsed.blocks,
        )

    def _extract_error(self, response: httpx.Response) -> str:
        """Извлечь сообщение об ошибке из ответа."""
        try:
            data = response.json()
        except ValueError:
            return response.text[:200] if response.text else f"HTTP {response.status_code}"

        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if isinstance(error, str):
            return error
        return str(data)
