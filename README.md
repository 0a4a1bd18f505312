# camstages

Building blocks for camera image post-processing pipelines. These work on plain
byte buffers and Python values, and numpy does the pixel work.

## Modules

- `camstages.pwl`: piecewise linear functions, with `Pwl`, `Point`, `Interval` and `PerpType`.
  - A `Pwl` can be built from a flat `x0, y0, x1, y1, ...` sequence (`Pwl.from_params`).
  - It can be evaluated with `evaluate` and `evaluate_span`, and searched for perpendiculars with `invert`.
  - Two functions can be chained with `compose`, or walked and combined knot by knot with `Pwl.map2` and `Pwl.combine`.
  - `match_domain` extends a function to cover a domain. `generate_lut` turns it into a lookup table. `*` and `*=` scale its values.
- `camstages.stage`: the `PostProcessingStage` abstract base class and the `StreamInfo` dataclass. It also holds:
  - a registry of stages, through `register_stage` and `get_post_processing_stages`;
  - `yuv420_to_rgb`, which converts a YUV420 image to packed RGB and crops from the centre when the source is larger;
  - `get_json_array`, which reads a list from a mapping and pads it with the tail of a default;
  - `execution_time`, which times a call in microseconds.
- `camstages.detection`: the result dataclasses `Rectangle`, `Detection` and `Segmentation`. `str(detection)` gives a one-line summary.
- `camstages.udp_stage`: `ObjectDetectUdpStage` sends every entry of the request metadata key `"object_detect.results"` as a binary UDP datagram.
  - It reads the `ip` parameter (default `127.0.0.1`) and the `port` parameter (default `12347`).
  - It is a context manager and closes its socket on exit.
  - `encode_detection` and `decode_detection` build and read the datagrams. The category is not sent, so it decodes as `0`.
- `camstages.pose`: the pose-estimation helpers.
  - `interpret_pose` turns 9x9x17 heatmap and offset tensors into keypoint locations and confidences, scaled to an image size.
  - `check_pose_output_dims` validates the heatmap tensor shape.
  - `pose_overlay` works out which keypoints to circle and which skeleton lines to draw for a threshold. The keypoints are named by `Feature`.
- `camstages.segmentation`: the segmentation helpers.
  - `read_labels_file` reads a labels file.
  - `check_segmentation_dims` validates the tensor shape.
  - `segment` picks the most confident category for each pixel and returns a histogram.
  - `dominant_categories` lists the labels at or above a pixel-count threshold.
  - `draw_segmentation` draws the 257x257 map in greyscale into the bottom right corner of a YUV420 buffer.
- `camstages.preview`: the `Preview` interface and `NullPreview`, which shows nothing and hands each buffer straight back through the done callback. It also holds:
  - the `PreviewFactory` registry, reached through `get_preview_factory` and `register_preview`;
  - `PreviewOptions`;
  - `make_preview`, which picks a preview by name: `"null"`, `"qt"`, `"egl"`, then `"drm"`, falling back to `"null"`.
- `camstages.yuv_preview`: `yuv420_to_rgb_scaled` resamples a YUV420 image to a given even size as RGB, by nearest neighbour. It uses coefficients chosen by `conversion_coefficients` for a `ColourSpace`.

## Installation

```
pip install .
```

## Examples

```python
from camstages.pwl import Pwl, Point

gamma = Pwl([Point(0, 0), Point(128, 200), Point(255, 255)])
print(gamma.evaluate(64))
lut = gamma.generate_lut()
```

```python
from camstages.detection import Detection, Rectangle
from camstages.udp_stage import encode_detection, decode_detection

det = Detection(1, "person", 0.87, Rectangle(10, 20, 100, 200))
packet = encode_detection(det)
print(decode_detection(packet))
```

## What it does not do

- The package does not talk to a camera. Stages expect an application object and completed requests supplied by the caller.
- It runs no neural network models. The pose and segmentation helpers only decode output tensors that you provide.
- It does not draw on images, apart from `draw_segmentation`. `pose_overlay` only describes what to draw.
- Only `NullPreview` is registered. There are no window previews, so `make_preview` ends up with the null preview unless you register your own `"qt"`, `"egl"` or `"drm"` implementation.
- There is no command-line program.

## Running the tests

```
pip install .[test]
pytest
```