"""Camera post-processing stages, piecewise linear functions, YUV conversion and preview helpers."""

__version__ = "1.10.0"

__all__ = [
    "detection",
    "pose",
    "preview",
    "pwl",
    "segmentation",
    "stage",
    "udp_stage",
    "yuv_preview",
]