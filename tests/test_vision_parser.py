import pytest

from receipt_core.vision import extract_block_text, parse_annotation

from .fixtures import block_annotation, make_block


def _symbols(text, break_type=None, nested=True):
    symbols = [{"text": ch} for ch in text]
    if break_type:
        marker = {"detectedBreak": {"type": break_type}}
        if nested:
            symbols[-1]["property"] = marker
        else:
            symbols[-1].update(marker)
    return {"symbols": symbols}


@pytest.mark.unit
def test_block_text_honours_break_markers():
    block = {
        "paragraphs": [
            {
                "words": [
                    _symbols("NIKE", "SPACE"),
                    _symbols("STORE", "EOL_SURE_SPACE"),
                    _symbols("Size", "SURE_SPACE"),
                    _symbols("10", "LINE_BREAK"),
                ]
            },
            {"words": [_symbols("$120.00")]},
        ]
    }
    assert extract_block_text(block) == "NIKE STORE\nSize 10\n$120.00"


@pytest.mark.unit
def test_block_text_accepts_top_level_detected_break():
    block = {"paragraphs": [{"words": [_symbols("A1", "SPACE", nested=False), _symbols("B2")]}]}
    assert extract_block_text(block) == "A1 B2"


@pytest.mark.unit
def test_block_text_ignores_unknown_breaks():
    block = {"paragraphs": [{"words": [_symbols("Air", "HYPHEN"), _symbols("Max")]}]}
    assert extract_block_text(block) == "AirMax"


@pytest.mark.unit
def test_blocks_sorted_by_min_y_and_joined_with_newlines():
    annotation = block_annotation(
        make_block(["TOTAL $120.00"], 400, 440),
        make_block(["NIKE STORE"], 10, 50),
        make_block(["Style AB1234-100", "Size 10"], 100, 180),
    )
    parsed = parse_annotation(annotation)

    assert parsed.text == "NIKE STORE\nStyle AB1234-100\nSize 10\nTOTAL $120.00"
    assert [b.min_y for b in parsed.blocks] == [10, 100, 400]
    assert [b.max_y for b in parsed.blocks] == [50, 180, 440]


@pytest.mark.unit
def test_missing_vertex_y_counts_as_zero():
    block = make_block(["Header line"], 0, 0)
    block["boundingBox"]["vertices"] = [{"x": 5}, {"x": 50}, {"x": 50, "y": 30}, {"x": 5, "y": 30}]
    parsed = parse_annotation(block_annotation(block))
    assert (parsed.blocks[0].min_y, parsed.blocks[0].max_y) == (0, 30)


@pytest.mark.unit
def test_vertex_y_is_whole_pixels():
    block = make_block(["Subtotal"], 0, 0)
    block["boundingBox"]["vertices"] = [{"y": 12.0}, {"y": 12.0}, {"y": 41.0}, {"y": 41.0}]
    parsed = parse_annotation(block_annotation(block))
    bounds = (parsed.blocks[0].min_y, parsed.blocks[0].max_y)
    assert bounds == (12, 41)
    assert all(type(y) is int for y in bounds)


@pytest.mark.unit
def test_blocks_without_geometry_or_text_are_skipped():
    no_vertices = make_block(["ghost"], 0, 10)
    no_vertices["boundingBox"] = {"vertices": []}
    blank = {"boundingBox": {"vertices": [{"y": 5}]}, "paragraphs": [{"words": [_symbols(" ")]}]}
    kept = make_block(["Order #123"], 60, 90)

    parsed = parse_annotation(block_annotation(no_vertices, blank, kept))
    assert parsed.text == "Order #123"
    assert len(parsed.blocks) == 1


@pytest.mark.unit
def test_falls_back_to_flat_full_text():
    annotation = {"fullTextAnnotation": {"pages": [{"blocks": []}], "text": "line one\n\nline two\n"}}
    parsed = parse_annotation(annotation)
    assert parsed.text == "line one\n\nline two\n"
    assert parsed.blocks == []


@pytest.mark.unit
def test_falls_back_to_first_text_annotation():
    annotation = {
        "textAnnotations": [
            {"description": "whole image text"},
            {"description": "whole"},
        ]
    }
    parsed = parse_annotation(annotation)
    assert parsed.text == "whole image text"
    assert parsed.blocks == []


@pytest.mark.unit
@pytest.mark.parametrize("annotation", [None, {}, {"textAnnotations": []}, {"fullTextAnnotation": {}}])
def test_empty_annotation_yields_empty_text(annotation):
    parsed = parse_annotation(annotation)
    assert parsed.text == ""
    assert parsed.blocks == []
