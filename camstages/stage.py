"""Post-processing stage base class, helpers and stage registry."""

from __future__ import annotations

import abc
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import numpy as np


@dataclass
class StreamInfo:
    """Geometry of an image stream."""

    width: int = 0
    height: int = 0
    stride: int = 0
    colour_space: Any = None


class PostProcessingStage(abc.ABC):
    """Base class for a stage run on every completed request."""

    def __init__(self, app: Any) -> None:
        self.app = app
        self.use_case: str | None = None
        self.running = False

    @abc.abstractmethod
    def name(self) -> str:
        """The name the stage is registered under."""

    def read(self, params: Mapping[str, Any]) -> None:
        """Read the stage's parameters."""

    def adjust_config(self, use_case: str, config: Any) -> None:
        """Adjust the stream configuration before it is applied.

        The base stage leaves the configuration alone and only records the
        use case it was asked about.
        """
        self.use_case = use_case

    def configure(self) -> None:
        """Called once the streams are configured."""

    def start(self) -> None:
        """Called when the camera starts."""
        self.running = True

    @abc.abstractmethod
    def process(self, completed_request: Any) -> bool:
        """Process a request; return True if it is to be dropped."""

    def stop(self) -> None:
        """Called when the camera stops."""
        self.running = False

    def teardown(self) -> None:
        """Called when the streams are torn down."""
        self.running = False
        self.use_case = None


def _as_bytes_array(data: Any) -> np.ndarray:
    if isinstance(data, np.ndarray):
        return data.astype(np.uint8, copy=False).ravel()
    return np.frombuffer(data, dtype=np.uint8)


def yuv420_to_rgb(src: Any, src_info: StreamInfo, dst_info: StreamInfo) -> bytes:
    """Convert a YUV420 image to packed RGB, cropping from the centre.

    The result is dst_info.height rows of dst_info.stride bytes.
    """
    if src_info.width < dst_info.width or src_info.height < dst_info.height:
        raise ValueError("destination image is larger than the source")
    if dst_info.stride < 3 * dst_info.width:
        raise ValueError("destination stride too small for RGB rows")

    width, height = dst_info.width, dst_info.height
    out = np.zeros((height, dst_info.stride), dtype=np.uint8)
    if width == 0 or height == 0:
        return out.tobytes()

    stride = src_info.stride
    off_x = ((src_info.width - width) // 2) & ~1
    off_y = ((src_info.height - height) // 2) & ~1
    y_size = src_info.height * stride
    u_size = (src_info.height // 2) * (stride // 2)

    rows = np.arange(height) + off_y
    cols = np.arange(width) + off_x
    y_idx = rows[:, None] * stride + cols[None, :]
    uv_idx = (rows // 2)[:, None] * (stride // 2) + (cols // 2)[None, :]

    data = _as_bytes_array(src)
    needed = max(int(y_idx.max()), y_size + u_size + int(uv_idx.max())) + 1
    if data.size < needed:
        raise ValueError(f"source buffer too short: {data.size} < {needed}")

    luma = data[y_idx].astype(np.int64).astype(np.float64)
    u = data[y_size + uv_idx].astype(np.int64) - 128
    v = data[y_size + u_size + uv_idx].astype(np.int64) - 128

    red = luma + 1.402 * v
    green = luma - 0.345 * u - 0.714 * v
    blue = luma + 1.771 * u
    rgb = np.stack([red, green, blue], axis=-1)
    rgb = np.clip(np.trunc(rgb), 0, 255).astype(np.uint8)
    out[:, : 3 * width] = rgb.reshape(height, 3 * width)
    return out.tobytes()


def get_json_array(
    params: Mapping[str, Any], key: str, default: Sequence[Any] = ()
) -> list[Any]:
    """Read a list under key, padded out with the tail of default."""
    values = list(params[key]) if key in params else []
    values.extend(default[len(values):])
    return values


def execution_time(f: Callable[..., Any], *args: Any) -> float:
    """Call f with args and return the time it took in microseconds."""
    start = time.perf_counter()
    f(*args)
    return (time.perf_counter() - start) * 1e6


StageCreateFunc = Callable[[Any], PostProcessingStage]

_STAGES: dict[str, StageCreateFunc] = {}


def register_stage(name: str, create_func: StageCreateFunc) -> StageCreateFunc:
    """Register a stage factory under name, replacing any earlier one."""
    _STAGES[name] = create_func
    return create_func


def get_post_processing_stages() -> Mapping[str, StageCreateFunc]:
    """A read-only view of the registered stages."""
    return MappingProxyType(_STAGES)