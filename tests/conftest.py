import pytest

from receipt_core import ChunkingConfig


@pytest.fixture
def reference_config():
    """Band height 3000px, overlap 300px, single-shot threshold 3000px."""
    return ChunkingConfig(single_shot_max_height=3000, chunk_height=3000, overlap=300, max_workers=1)


@pytest.fixture
def small_config():
    """Scaled-down thresholds so synthetic images stay small."""
    return ChunkingConfig(single_shot_max_height=300, chunk_height=300, overlap=30, max_workers=1)
