"""Result types produced by detection and segmentation stages."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Rectangle:
    """An axis-aligned rectangle in pixel coordinates."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0


@dataclass
class Detection:
    """One detected object."""

    category: int
    name: str
    confidence: float
    box: Rectangle = field(default_factory=Rectangle)

    def __str__(self) -> str:
        box = self.box
        return (
            f"{self.name}[{self.category}] ({self.confidence:.2g}) @ "
            f"{box.x},{box.y} {box.width}x{box.height}"
        )


@dataclass
class Segmentation:
    """A per-pixel category map with the labels it refers to."""

    width: int
    height: int
    labels: list[str] = field(default_factory=list)
    segmentation: bytes = b""