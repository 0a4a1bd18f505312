"""Pose estimation output decoding and skeleton overlay planning."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

FEATURE_SIZE = 17
HEATMAP_DIMS = 9

Location = tuple[int, int]


class Feature(enum.IntEnum):
    """Body keypoints in model output order."""

    NOSE = 0
    LEFT_EYE = 1
    RIGHT_EYE = 2
    LEFT_EAR = 3
    RIGHT_EAR = 4
    LEFT_SHOULDER = 5
    RIGHT_SHOULDER = 6
    LEFT_ELBOW = 7
    RIGHT_ELBOW = 8
    LEFT_WRIST = 9
    RIGHT_WRIST = 10
    LEFT_HIP = 11
    RIGHT_HIP = 12
    LEFT_KNEE = 13
    RIGHT_KNEE = 14
    LEFT_ANKLE = 15
    RIGHT_ANKLE = 16


_SKELETON = (
    (Feature.LEFT_SHOULDER, Feature.RIGHT_SHOULDER),
    (Feature.LEFT_SHOULDER, Feature.LEFT_ELBOW),
    (Feature.LEFT_SHOULDER, Feature.LEFT_HIP),
    (Feature.RIGHT_SHOULDER, Feature.RIGHT_ELBOW),
    (Feature.RIGHT_SHOULDER, Feature.RIGHT_HIP),
    (Feature.LEFT_ELBOW, Feature.LEFT_WRIST),
    (Feature.RIGHT_ELBOW, Feature.RIGHT_WRIST),
    (Feature.LEFT_HIP, Feature.RIGHT_HIP),
    (Feature.LEFT_HIP, Feature.LEFT_KNEE),
    (Feature.LEFT_KNEE, Feature.LEFT_ANKLE),
    (Feature.RIGHT_KNEE, Feature.RIGHT_HIP),
    (Feature.RIGHT_KNEE, Feature.RIGHT_ANKLE),
)


@dataclass
class PoseOverlay:
    """Circles and lines to draw over an image for one pose."""

    circles: list[Location] = field(default_factory=list)
    lines: list[tuple[Location, Location]] = field(default_factory=list)
    radius: int = 5
    thickness: int = 2
    colour: tuple[int, int, int] = (255, 255, 255)


def check_pose_output_dims(dims: Sequence[int]) -> None:
    """Raise ValueError unless dims are those of the expected heatmap tensor."""
    expected = (1, HEATMAP_DIMS, HEATMAP_DIMS, FEATURE_SIZE)
    if len(dims) < 4 or tuple(dims[:4]) != expected:
        raise ValueError("Unexpected pose estimation output dimensions")


def interpret_pose(
    heatmaps: Sequence[float] | np.ndarray,
    offsets: Sequence[float] | np.ndarray,
    width: int,
    height: int,
) -> tuple[list[Location], list[float]]:
    """Turn heatmap and offset tensors into keypoint locations and confidences.

    Locations are scaled to an image of the given width and height.
    """
    cells = HEATMAP_DIMS * HEATMAP_DIMS
    hm = np.asarray(heatmaps, dtype=np.float64).ravel()
    off = np.asarray(offsets, dtype=np.float64).ravel()
    if hm.size != cells * FEATURE_SIZE:
        raise ValueError(f"heatmaps must hold {cells * FEATURE_SIZE} values")
    if off.size != cells * FEATURE_SIZE * 2:
        raise ValueError(f"offsets must hold {cells * FEATURE_SIZE * 2} values")
    hm = hm.reshape(cells, FEATURE_SIZE)
    off = off.reshape(cells, FEATURE_SIZE * 2)

    # argmax keeps the first of equal maxima, scanning rows then columns.
    best = hm.argmax(axis=0)
    confidences = [float(hm[cell, i]) for i, cell in enumerate(best)]

    locations = []
    for i, cell in enumerate(best):
        y, x = divmod(int(cell), HEATMAP_DIMS)
        loc_y = int((y * height) // (HEATMAP_DIMS - 1) + off[cell, i])
        loc_x = int((x * width) // (HEATMAP_DIMS - 1) + off[cell, i + FEATURE_SIZE])
        locations.append((loc_x, loc_y))
    return locations, confidences


def pose_overlay(
    locations: Sequence[Location], confidences: Sequence[float], threshold: float
) -> PoseOverlay:
    """Decide what to draw: circles at keypoints below threshold, bones above it."""
    if len(locations) < FEATURE_SIZE or len(confidences) < FEATURE_SIZE:
        raise ValueError(f"need {FEATURE_SIZE} locations and confidences")
    points = [tuple(loc) for loc in locations]
    overlay = PoseOverlay()
    overlay.circles = [
        points[i] for i in range(FEATURE_SIZE) if confidences[i] < threshold
    ]
    overlay.lines = [
        (points[a], points[b])
        for a, b in _SKELETON
        if confidences[a] > threshold and confidences[b] > threshold
    ]
    return overlay