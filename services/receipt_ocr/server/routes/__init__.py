"""Routes для Receipt OCR API"""

from services.receipt_ocr.server.routes.ocr import router as ocr_router

__all__ = ["ocr_router"]
