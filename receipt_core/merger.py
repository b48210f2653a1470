"""Склейка результатов OCR перекрывающихся полос в один текст"""
from __future__ import annotations

import logging
from typing import List, Sequence

from .models import BandResult

logger = logging.getLogger(__name__)

# Сколько последних строк полосы проверяем на повтор в следующей полосе
TAIL_WINDOW = 20
# Сколько первых строк следующей полосы считаем её "головой"
HEAD_WINDOW = 15
# Длина сравниваемого префикса строки
PREFIX_LENGTH = 60
# Короткие строки ("1", "$5") не участвуют в поиске повтора
MIN_LINE_LENGTH = 5


def split_lines(text: str) -> List[str]:
    """Непустые строки текста без краевых пробелов"""
    return [line.strip() for line in text.splitlines() if line.strip()]


def find_cutoff(lines: Sequence[str], next_head: Sequence[str]) -> int:
    """
    Найти индекс, начиная с которого строки полосы повторяются в следующей полосе

    Идём по последним TAIL_WINDOW строкам с конца. Первое совпадение префикса
    со строкой из головы следующей полосы открывает серию повторов; серия
    продолжается назад, пока строки совпадают, и обрывается на первой несовпавшей.

    Returns:
        Индекс отсечки; len(lines), если повтор не найден
    """
    head_prefixes = {line[:PREFIX_LENGTH] for line in next_head}
    cutoff = len(lines)
    start = max(0, len(lines) - TAIL_WINDOW)

    for idx in range(len(lines) - 1, start - 1, -1):
        line = lines[idx]
        if len(line) < MIN_LINE_LENGTH:
            continue

        prefix = line[:PREFIX_LENGTH]
        if len(prefix) >= MIN_LINE_LENGTH and prefix in head_prefixes:
            cutoff = idx
        elif cutoff < len(lines):
            break

    return cutoff


def merge_band_results(results: Sequence[BandResult], overlap: int = 0) -> str:
    """
    Объединить упорядоченные результаты полос, убрав строки из зоны перекрытия

    Args:
        results: результаты OCR в порядке индекса полосы
        overlap: перекрытие полос в px (0 - полосы не пересекаются, дедупликация не нужна)

    Returns:
        Итоговый текст
    """
    if not results:
        return ""
    if len(results) == 1:
        return results[0].text

    ordered = sorted(results, key=lambda r: r.band_index)
    merged: List[str] = []

    for i, result in enumerate(ordered):
        lines = split_lines(result.text)

        if i == len(ordered) - 1 or overlap <= 0:
            merged.extend(lines)
            continue

        next_head = split_lines(ordered[i + 1].text)[:HEAD_WINDOW]
        cutoff = find_cutoff(lines, next_head)
        if cutoff < len(lines):
            logger.debug(
                f"[OCR] Полоса {result.band_index}: отброшено {len(lines) - cutoff} "
                f"повторяющихся строк"
            )
        merged.extend(lines[:cutoff])

    text = "\n".join(merged)
    logger.info(f"[OCR] Final merged text length: {len(text)}")
    return text
