"""Segmentation output decoding and drawing into a YUV420 image."""

from __future__ import annotations

import os
from collections.abc import Sequence
from typing import Any

import numpy as np

from camstages.stage import StreamInfo

WIDTH = 257
HEIGHT = 257


def read_labels_file(path: str | os.PathLike[str]) -> list[str]:
    """Read one label per line."""
    try:
        with open(path, encoding="utf-8", newline="") as f:
            text = f.read()
    except OSError as exc:
        raise OSError(f"Failed to load labels file {path}") from exc
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def check_segmentation_dims(dims: Sequence[int], num_labels: int) -> None:
    """Raise ValueError unless dims are (n, HEIGHT, WIDTH, num_labels)."""
    if len(dims) != 4 or dims[1] != HEIGHT or dims[2] != WIDTH or dims[3] != num_labels:
        raise ValueError("Unexpected segmentation output tensor size")


def segment(output: Any, num_categories: int) -> tuple[bytes, list[int]]:
    """Pick the most confident category per pixel.

    Returns the category map and a histogram of pixels per category.
    """
    if num_categories <= 0:
        raise ValueError("need at least one category")
    values = np.asarray(output, dtype=np.float64).ravel()
    if values.size % num_categories:
        raise ValueError("output size is not a multiple of the category count")
    indices = values.reshape(-1, num_categories).argmax(axis=1)
    histogram = np.bincount(indices, minlength=num_categories)
    return indices.astype(np.uint8).tobytes(), [int(n) for n in histogram]


def dominant_categories(
    histogram: Sequence[int], labels: Sequence[str], threshold: int
) -> list[tuple[str, int]]:
    """Labels with at least threshold pixels, largest first."""
    ranked = sorted(enumerate(histogram), key=lambda item: item[1], reverse=True)
    result = []
    for index, count in ranked:
        if count < threshold:
            break
        result.append((labels[index], count))
    return result


def draw_segmentation(
    buffer: bytearray | memoryview,
    segmentation: bytes,
    info: StreamInfo,
    num_labels: int,
) -> None:
    """Draw the map greyscale into the bottom right corner of a YUV420 buffer."""
    if num_labels <= 0:
        raise ValueError("need at least one label")
    if len(segmentation) != WIDTH * HEIGHT:
        raise ValueError(f"segmentation must hold {WIDTH * HEIGHT} values")
    y_offset = info.height - HEIGHT
    x_offset = info.width - WIDTH
    if y_offset < 0 or x_offset < 0:
        raise ValueError("image is smaller than the segmentation map")

    stride = info.stride
    y_size = info.height * stride
    uv_size = (info.height // 2) * (stride // 2)
    view = np.frombuffer(buffer, dtype=np.uint8)
    if view.size < y_size + 2 * uv_size:
        raise ValueError("buffer too small for the stream")

    scale = 255 // num_labels
    seg = np.frombuffer(segmentation, dtype=np.uint8).reshape(HEIGHT, WIDTH)
    luma = view[:y_size].reshape(info.height, stride)
    luma[y_offset:y_offset + HEIGHT, x_offset:x_offset + WIDTH] = (
        seg.astype(np.int64) * scale
    ).astype(np.uint8)

    y_offset //= 2
    x_offset //= 2
    half_rows, half_cols = HEIGHT // 2, WIDTH // 2
    for start in (y_size, y_size + uv_size):
        plane = view[start:start + uv_size].reshape(info.height // 2, stride // 2)
        plane[y_offset:y_offset + half_rows, x_offset:x_offset + half_cols] = 128