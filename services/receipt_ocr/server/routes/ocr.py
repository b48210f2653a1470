"""Обработчик распознавания чека через Google Vision"""
import logging
import uuid
from typing import Optional

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from receipt_core import ChunkingConfig, GoogleVisionClient, ReceiptOCRError, ReceiptTranscriber
from services.receipt_ocr.server.settings import Settings, settings

_logger = logging.getLogger(__name__)

router = APIRouter(tags=["ocr"])


class OCRRequest(BaseModel):
    image: Optional[str] = None


def build_transcriber(cfg: Settings) -> ReceiptTranscriber:
    """Собрать транскрайбер из настроек сервера"""
    client = GoogleVisionClient(
        api_key=cfg.google_vision_api_key,
        endpoint=cfg.google_vision_endpoint,
        timeout=cfg.google_vision_timeout,
        language_hints=list(cfg.language_hints),
    )
    config = ChunkingConfig(
        single_shot_max_height=cfg.single_shot_max_height,
        chunk_height=cfg.chunk_height,
        overlap=cfg.chunk_overlap,
        max_workers=cfg.max_workers,
    )
    return ReceiptTranscriber(client=client, config=config)


@router.post("/google-ocr")
async def google_ocr_handler(body: OCRRequest) -> JSONResponse:
    """Распознать изображение чека (data URI или base64) в текст.

    Ответ: {"text", "dimensions": {"width", "height", "format"}, "chunked"}.
    """
    if not body.image:
        return JSONResponse(status_code=400, content={"error": "No image provided"})

    if not settings.google_vision_api_key:
        return JSONResponse(
            status_code=500, content={"error": "GOOGLE_VISION_API_KEY not configured"}
        )

    job_id = uuid.uuid4().hex[:12]
    _logger.info(f"POST /google-ocr: job_id={job_id}, payload={len(body.image)} chars")

    try:
        transcriber = build_transcriber(settings)
        transcript = await run_in_threadpool(transcriber.run, body.image, job_id)
    except ReceiptOCRError as e:
        _logger.error(f"OCR error (job_id={job_id}): {e}", extra={"exception_type": type(e).__name__})
        return JSONResponse(
            status_code=500,
            content={
                "error": "OCR failed",
                "message": str(e) or "Failed to extract text from image.",
            },
        )
    except Exception as e:
        _logger.error(f"Unexpected OCR error (job_id={job_id}): {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "OCR failed", "message": "Failed to extract text from image."},
        )

    if transcript.failed_bands:
        _logger.warning(f"OCR job {job_id}: полосы без результата {transcript.failed_bands}")

    return JSONResponse(status_code=200, content=transcript.to_dict())
