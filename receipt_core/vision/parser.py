"""Разбор ответа Google Vision (DOCUMENT_TEXT_DETECTION).

Ответ провайдера приходит в разной форме: иерархия pages/blocks/paragraphs/words/symbols,
плоский fullTextAnnotation.text или список textAnnotations. Парсеры формы перебираются
в фиксированном порядке, первый вернувший результат побеждает.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..models import TextBlock

SPACE_BREAKS = frozenset({"SPACE", "SURE_SPACE"})
LINE_BREAKS = frozenset({"EOL_SURE_SPACE", "LINE_BREAK"})


@dataclass
class ParsedText:
    """Текст полосы и блоки, отсортированные по minY."""

    text: str = ""
    blocks: List[TextBlock] = field(default_factory=list)


def _break_type(symbol: dict) -> Optional[str]:
    # Google кладёт detectedBreak в property, но встречается и на верхнем уровне
    detected = (symbol.get("property") or {}).get("detectedBreak") or symbol.get("detectedBreak")
    if not detected:
        return None
    return detected.get("type")


def extract_block_text(block: dict) -> str:
    """Собрать текст блока из символов с учётом маркеров разрывов."""
    parts: List[str] = []
    for paragraph in block.get("paragraphs") or []:
        for word in paragraph.get("words") or []:
            for symbol in word.get("symbols") or []:
                parts.append(symbol.get("text") or "")
                break_type = _break_type(symbol)
                if break_type in SPACE_BREAKS:
                    parts.append(" ")
                elif break_type in LINE_BREAKS:
                    parts.append("\n")
    return "".join(parts).strip()


def _vertical_bounds(block: dict) -> Optional[tuple]:
    vertices = (block.get("boundingBox") or {}).get("vertices") or []
    if not vertices:
        return None
    # Нулевые координаты Google опускает
    ys = [int(vertex.get("y", 0) or 0) for vertex in vertices]
    return min(ys), max(ys)


def parse_page_blocks(annotation: dict) -> Optional[ParsedText]:
    """Форма (a): структурная иерархия страниц и блоков."""
    full_text = annotation.get("fullTextAnnotation") or {}
    blocks: List[TextBlock] = []

    for page in full_text.get("pages") or []:
        for block in page.get("blocks") or []:
            bounds = _vertical_bounds(block)
            if bounds is None:
                continue
            text = extract_block_text(block)
            if not text:
                continue
            blocks.append(TextBlock(text=text, min_y=bounds[0], max_y=bounds[1]))

    if not blocks:
        return None

    blocks.sort(key=lambda b: b.min_y)
    return ParsedText(text="\n".join(b.text for b in blocks), blocks=blocks)


def parse_flat_text(annotation: dict) -> Optional[ParsedText]:
    """Форма (b): плоский fullTextAnnotation.text."""
    text = (annotation.get("fullTextAnnotation") or {}).get("text")
    if not text:
        return None
    return ParsedText(text=text)


def parse_text_annotations(annotation: dict) -> Optional[ParsedText]:
    """Форма (c): первое описание из textAnnotations."""
    text_annotations = annotation.get("textAnnotations") or []
    if not text_annotations:
        return None
    return ParsedText(text=text_annotations[0].get("description") or "")


SHAPE_PARSERS: Sequence[Callable[[dict], Optional[ParsedText]]] = (
    parse_page_blocks,
    parse_flat_text,
    parse_text_annotations,
)


def parse_annotation(annotation: Optional[dict]) -> ParsedText:
    """Разобрать один элемент responses[] ответа images:annotate."""
    if not annotation:
        return ParsedText()

    for parser in SHAPE_PARSERS:
        parsed = parser(annotation)
        if parsed is not None:
            return parsed

    return ParsedText()
