"""Scaled YUV420 to RGB conversion as used for drawing a preview pane."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any

import numpy as np

from camstages.stage import StreamInfo

log = logging.getLogger(__name__)


class ColourSpace(enum.Enum):
    """Colour spaces with a known YUV to RGB matrix."""

    SYCC = "sYCC"
    SMPTE170M = "SMPTE170M"
    REC709 = "Rec709"


@dataclass(frozen=True)
class YuvCoefficients:
    """Luma offset and the non-trivial entries of a YUV to RGB matrix."""

    offset_y: int
    y: float
    v_r: float
    u_g: float
    v_g: float
    u_b: float


_JPEG = YuvCoefficients(0, 1.0, 1.402, -0.344, -0.714, 1.772)
_SMPTE170M = YuvCoefficients(16, 1.164, 1.596, -0.392, -0.813, 2.017)
_REC709 = YuvCoefficients(16, 1.164, 1.793, -0.213, -0.533, 2.112)


def conversion_coefficients(colour_space: Any) -> YuvCoefficients:
    """The matrix for colour_space; anything unknown gets the full-range JPEG one."""
    if colour_space == ColourSpace.SMPTE170M:
        return _SMPTE170M
    if colour_space == ColourSpace.REC709:
        return _REC709
    if colour_space != ColourSpace.SYCC:
        log.info("unexpected colour space %s", colour_space)
    return _JPEG


def yuv420_to_rgb_scaled(buffer: Any, info: StreamInfo, width: int, height: int) -> bytes:
    """Resample a YUV420 image to width x height packed RGB, nearest neighbour.

    Adjacent output pixel pairs share their U and V samples.
    """
    if width <= 0 or height <= 0 or width % 2 or height % 2:
        raise ValueError("output dimensions must be positive and even")
    if info.width <= 0 or info.height <= 0:
        raise ValueError("source image is empty")

    coeffs = conversion_coefficients(info.colour_space)
    x_step = (info.width << 16) // width
    y_step = (info.height << 16) // height
    stride = info.stride
    half = stride >> 1

    if isinstance(buffer, np.ndarray):
        data = buffer.astype(np.uint8, copy=False).ravel()
    else:
        data = np.frombuffer(buffer, dtype=np.uint8)

    rows = (np.arange(height, dtype=np.int64) * y_step) >> 16
    y_base = rows * stride
    u_base = ((4 * info.height + rows) >> 1) * half
    v_base = ((5 * info.height + rows) >> 1) * half

    pos0 = (x_step >> 1) + np.arange(width // 2, dtype=np.int64) * 2 * x_step
    pos1 = pos0 + x_step
    y0_idx = y_base[:, None] + (pos0 >> 16)[None, :]
    y1_idx = y_base[:, None] + (pos1 >> 16)[None, :]
    u_idx = u_base[:, None] + (pos1 >> 17)[None, :]
    v_idx = v_base[:, None] + (pos1 >> 17)[None, :]

    needed = int(max(y1_idx.max(), u_idx.max(), v_idx.max())) + 1
    if data.size < needed:
        raise ValueError(f"source buffer too short: {data.size} < {needed}")

    f32 = np.float32
    y0 = (data[y0_idx].astype(np.int64) - coeffs.offset_y).astype(f32)
    y1 = (data[y1_idx].astype(np.int64) - coeffs.offset_y).astype(f32)
    u = (data[u_idx].astype(np.int64) - 128).astype(f32)
    v = (data[v_idx].astype(np.int64) - 128).astype(f32)

    cy, cvr, cug, cvg, cub = (
        f32(coeffs.y), f32(coeffs.v_r), f32(coeffs.u_g), f32(coeffs.v_g), f32(coeffs.u_b)
    )
    chroma_g = cug * u + cvg * v
    pixels = np.stack(
        [
            cy * y0 + cvr * v,
            cy * y0 + chroma_g,
            cy * y0 + cub * u,
            cy * y1 + cvr * v,
            cy * y1 + chroma_g,
            cy * y1 + cub * u,
        ],
        axis=-1,
    )
    rgb = np.clip(np.trunc(pixels), 0, 255).astype(np.uint8)
    return rgb.reshape(height, width * 3).tobytes()