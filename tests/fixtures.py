"""Test fixtures: synthetic receipt images and a stubbed Google Vision endpoint."""

import base64
import io
import json
import threading
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import httpx
from PIL import Image

from receipt_core import GoogleVisionClient

ROW_STEP = 100

StubResponse = Tuple[int, Union[dict, str]]


def make_image(
    height: int, width: int = 40, fmt: str = "PNG", mode: str = "L"
) -> bytes:
    """Encode an image whose rows are shaded by ``(y // ROW_STEP) % 256``.

    The shade of a band's first row identifies the band's y offset, so a
    stub can recognise which band a request carries regardless of order.
    """
    raw = bytes(
        (y // ROW_STEP) % 256 for y in range(height) for _ in range(width)
    )
    image = Image.frombytes("L", (width, height), raw)
    if mode != "L":
        image = image.convert(mode)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def make_block(lines: Sequence[str], min_y: int, max_y: int) -> dict:
    """Build a Vision block whose symbols carry SPACE/LINE_BREAK markers."""
    words = []
    for line in lines:
        tokens = line.split(" ")
        for word_idx, token in enumerate(tokens):
            symbols = [{"text": ch} for ch in token]
            last_in_line = word_idx == len(tokens) - 1
            symbols[-1]["property"] = {
                "detectedBreak": {
                    "type": "LINE_BREAK" if last_in_line else "SPACE"
                }
            }
            words.append({"symbols": symbols})
    return {
        "boundingBox": {
            "vertices": [
                {"x": 0, "y": min_y},
                {"x": 100, "y": min_y},
                {"x": 100, "y": max_y},
                {"x": 0, "y": max_y},
            ]
        },
        "paragraphs": [{"words": words}],
    }


def block_annotation(*blocks: dict) -> dict:
    return {"fullTextAnnotation": {"pages": [{"blocks": list(blocks)}]}}


def lines_annotation(lines: Sequence[str], line_height: int = 40) -> dict:
    """One block per line, stacked top to bottom."""
    blocks = [
        make_block([line], idx * line_height, idx * line_height + line_height - 5)
        for idx, line in enumerate(lines)
    ]
    return block_annotation(*blocks)


def ok(annotation: dict) -> StubResponse:
    return 200, {"responses": [annotation]}


def error(message: str, status: int = 400) -> StubResponse:
    return status, {"error": {"code": status, "message": message}}


class VisionStub:
    """Callable for ``httpx.MockTransport`` replaying canned responses."""

    def __init__(
        self,
        responses: Sequence[StubResponse] = (),
        by_offset: Optional[Dict[int, StubResponse]] = None,
    ):
        self.responses: List[StubResponse] = list(responses)
        self.by_offset = by_offset
        self.requests: List[httpx.Request] = []
        self._lock = threading.Lock()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
            position = len(self.requests) - 1

        if self.by_offset is not None:
            status, body = self.by_offset[self.first_row_offset(request)]
        else:
            status, body = self.responses[position]

        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    @staticmethod
    def payload(request: httpx.Request) -> dict:
        return json.loads(request.content)

    @classmethod
    def image(cls, request: httpx.Request) -> Image.Image:
        content = cls.payload(request)["requests"][0]["image"]["content"]
        return Image.open(io.BytesIO(base64.b64decode(content)))

    @classmethod
    def first_row_offset(cls, request: httpx.Request) -> int:
        image = cls.image(request).convert("L")
        return image.getpixel((0, 0)) * ROW_STEP

    @property
    def band_heights(self) -> List[int]:
        return [self.image(request).height for request in self.requests]

    def client(self, **kwargs) -> GoogleVisionClient:
        return GoogleVisionClient(
            api_key="test-key",
            http_client=httpx.Client(transport=httpx.MockTransport(self)),
            **kwargs,
        )


def raising_transport(exc_factory: Callable[[httpx.Request], Exception]):
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_factory(request)

    return httpx.MockTransport(handler)
