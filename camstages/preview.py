"""Preview window interface, the null preview and the preview registry."""

from __future__ import annotations

import abc
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from camstages.stage import StreamInfo

log = logging.getLogger(__name__)

DoneCallback = Callable[[int], None]


@dataclass
class PreviewOptions:
    """Options that choose and place the preview window."""

    nopreview: bool = False
    qt_preview: bool = False
    fullscreen: bool = False
    preview_x: int = 0
    preview_y: int = 0
    preview_width: int = 0
    preview_height: int = 0


class Preview(abc.ABC):
    """A window that displays camera buffers and hands them back when done."""

    def __init__(self, options: PreviewOptions) -> None:
        self.options = options
        self._done_callback: DoneCallback | None = None

    def set_done_callback(self, callback: DoneCallback) -> None:
        """Set the function called with a buffer's fd once it can be recycled."""
        self._done_callback = callback

    def _buffer_done(self, fd: int) -> None:
        if self._done_callback is None:
            raise RuntimeError("no done callback set on the preview")
        self._done_callback(fd)

    def set_info_text(self, text: str) -> None:
        """Show some status text, if the preview has somewhere to put it."""

    @abc.abstractmethod
    def show(self, fd: int, span: Any, info: StreamInfo) -> None:
        """Display a buffer; its fd comes back through the done callback."""

    @abc.abstractmethod
    def reset(self) -> None:
        """Forget the current buffers, ready to show new ones."""

    def quit(self) -> bool:
        """Whether the preview window has been shut down."""
        return False

    @abc.abstractmethod
    def max_image_size(self) -> tuple[int, int]:
        """The largest (width, height) allowed; zeroes mean no limit."""


class NullPreview(Preview):
    """A preview that shows nothing and returns every buffer at once."""

    def __init__(self, options: PreviewOptions) -> None:
        super().__init__(options)
        self.frames_shown = 0
        log.debug("Running without preview window")

    def show(self, fd: int, span: Any, info: StreamInfo) -> None:
        self.frames_shown += 1
        self._buffer_done(fd)

    def reset(self) -> None:
        """Holds no buffers, so only the count of frames shown starts again."""
        self.frames_shown = 0

    def max_image_size(self) -> tuple[int, int]:
        return 0, 0

    def set_info_text(self, text: str) -> None:
        log.info("%s", text)


PreviewCreateFunc = Callable[[PreviewOptions], Preview]


class PreviewFactory:
    """Registry of preview implementations by name."""

    def __init__(self) -> None:
        self._previews: dict[str, PreviewCreateFunc] = {}

    def register(self, name: str, create_func: PreviewCreateFunc) -> PreviewCreateFunc:
        """Register create_func under name, replacing any earlier one."""
        self._previews[name] = create_func
        return create_func

    def create(self, name: str) -> PreviewCreateFunc | None:
        """The factory function registered under name, or None."""
        return self._previews.get(name)

    def has(self, name: str) -> bool:
        return name in self._previews

    def previews(self) -> Mapping[str, PreviewCreateFunc]:
        """A read-only view of the registered previews."""
        return MappingProxyType(self._previews)


_FACTORY = PreviewFactory()


def get_preview_factory() -> PreviewFactory:
    """The process-wide preview registry."""
    return _FACTORY


def register_preview(name: str, create_func: PreviewCreateFunc) -> PreviewCreateFunc:
    """Register a preview implementation with the process-wide registry."""
    return _FACTORY.register(name, create_func)


def _create(factory: PreviewFactory, name: str, options: PreviewOptions) -> Preview:
    create_func = factory.create(name)
    if create_func is None:
        raise RuntimeError(f"{name} libraries unavailable.")
    return create_func(options)


def make_preview(options: PreviewOptions) -> Preview | None:
    """Make the preview the options ask for, falling back as far as the null one.

    Returns None only when a Qt preview is asked for and none is registered.
    """
    factory = get_preview_factory()
    if options.nopreview:
        return _create(factory, "null", options)
    if options.qt_preview:
        if factory.has("qt"):
            log.info("Made QT preview window")
            return _create(factory, "qt", options)
        return None
    for name, label in (("egl", "X/EGL"), ("drm", "DRM")):
        try:
            if not factory.has(name):
                raise RuntimeError(f"{name} libraries unavailable.")
            log.info("Made %s preview window", label)
            return _create(factory, name, options)
        except Exception as exc:  # any failure falls through to the next preview
            log.debug("%s preview failed: %s", label, exc)
    log.info("Preview window unavailable")
    return _create(factory, "null", options)


register_preview("null", NullPreview)