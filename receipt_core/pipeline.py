"""Оркестрация распознавания чека: single-shot или нарезка на полосы"""
from __future__ import annotations

import contextvars
import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from PIL import Image

from .config import ChunkingConfig
from .exceptions import ProviderError
from .imaging import decode_payload, extract_band, inspect_image, open_image, plan_bands
from .logging_config import LogContext
from .merger import merge_band_results
from .models import Band, BandResult, SourceImage, TextBlock, Transcript
from .vision import GoogleVisionClient

logger = logging.getLogger(__name__)

# maxResults для запроса по целому изображению
SINGLE_SHOT_MAX_RESULTS = 50


@dataclass
class ReceiptTranscriber:
    """Превращает изображение чека произвольной высоты в упорядоченный текст"""

    client: GoogleVisionClient
    config: ChunkingConfig = field(default_factory=ChunkingConfig)

    def __post_init__(self) -> None:
        self.config.validate()

    def run(self, payload: Union[bytes, str], job_id: Optional[str] = None) -> Transcript:
        """
        Распознать чек

        Args:
            payload: байты изображения, base64 или data URI
            job_id: идентификатор задачи для логов

        Returns:
            Transcript с текстом, размерами и флагом chunked
        """
        job_id = job_id or uuid.uuid4().hex[:12]
        started = time.monotonic()

        with LogContext(job_id=job_id):
            source = inspect_image(decode_payload(payload))
            logger.info(f"[OCR] Image dimensions: {source.width}x{source.height}")

            if source.height <= self.config.single_shot_max_height:
                logger.info("[OCR] Processing as single image")
                transcript = self._run_single(source)
            else:
                logger.info(
                    f"[OCR] Long image detected ({source.height}px). Slicing into chunks..."
                )
                transcript = self._run_chunked(source)

            logger.info(
                "[OCR] Задача завершена",
                extra={
                    "chunked": transcript.chunked,
                    "duration_ms": int((time.monotonic() - started) * 1000),
                },
            )
            return transcript

    def _run_single(self, source: SourceImage) -> Transcript:
        # Ошибка провайдера здесь прерывает задачу целиком
        band = Band(index=0, y_offset=0, height=source.height)
        result = self.client.detect(source.data, band, max_results=SINGLE_SHOT_MAX_RESULTS)
        return Transcript(
            text=result.text,
            width=source.width,
            height=source.height,
            format=source.format,
            chunked=False,
            blocks=result.global_blocks,
        )

    def _run_chunked(self, source: SourceImage) -> Transcript:
        bands = plan_bands(source.height, self.config.chunk_height, self.config.overlap)
        logger.info(f"[OCR] Created {len(bands)} physical chunks", extra={"band_count": len(bands)})

        results, failed = self.fetch_bands(source, bands)
        text = merge_band_results(results, self.config.overlap)

        blocks: List[TextBlock] = []
        for result in results:
            blocks.extend(result.global_blocks)

        return Transcript(
            text=text,
            width=source.width,
            height=source.height,
            format=source.format,
            chunked=True,
            blocks=blocks,
            failed_bands=failed,
        )

    def fetch_bands(self, source: SourceImage, bands: Sequence[Band]) -> tuple[List[BandResult], List[int]]:
        """
        Получить OCR всех полос; результаты возвращаются строго в порядке индекса полосы

        Returns:
            (результаты по порядку полос, индексы полос с ошибкой провайдера)
        """
        failed: List[int] = []

        with open_image(source) as image:
            if self.config.max_workers <= 1:
                results = [self._fetch_band(image, band, len(bands), failed) for band in bands]
                return results, failed

            # Кропы режем заранее: PIL Image не потокобезопасен
            pixels = {band.index: extract_band(image, band) for band in bands}

        by_index: Dict[int, BandResult] = {}
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = {
                executor.submit(
                    contextvars.copy_context().run,
                    self._detect_band,
                    pixels[band.index],
                    band,
                    len(bands),
                    failed,
                ): band
                for band in bands
            }
            for future in as_completed(futures):
                band = futures[future]
                by_index[band.index] = future.result()

        return [by_index[band.index] for band in bands], sorted(failed)

    def _fetch_band(
        self, image: Image.Image, band: Band, total: int, failed: List[int]
    ) -> BandResult:
        pixels = extract_band(image, band)
        return self._detect_band(pixels, band, total, failed)

    def _detect_band(
        self, pixels: bytes, band: Band, total: int, failed: List[int]
    ) -> BandResult:
        extra = {"band_index": band.index, "y_offset": band.y_offset, "band_height": band.height}
        logger.info(f"[OCR] OCR processing chunk {band.index + 1}/{total}...", extra=extra)

        try:
            result = self.client.detect(pixels, band)
        except ProviderError as e:
            # Вклад полосы с ошибкой провайдера пустой
            logger.warning(
                f"[OCR] Chunk {band.index + 1} failed, skipping: {e}",
                extra={**extra, "exception_type": type(e).__name__},
            )
            failed.append(band.index)
            return BandResult.empty(band)

        logger.info(f"[OCR] Chunk {band.index + 1} returned {len(result.blocks)} blocks", extra=extra)
        return result
