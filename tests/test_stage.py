import pytest

from camstages.stage import (
    PostProcessingStage,
    StreamInfo,
    execution_time,
    get_json_array,
    get_post_processing_stages,
    register_stage,
    yuv420_to_rgb,
)


def make_yuv(width, height, y_plane, u=128, v=128):
    """y_plane is a flat list of width*height luma values; stride equals width."""
    chroma = (height // 2) * (width // 2)
    return bytes(list(y_plane) + [u] * chroma + [v] * chroma)


class DummyStage(PostProcessingStage):
    def name(self):
        return "dummy"

    def process(self, completed_request):
        return False


@pytest.mark.parametrize("dst", [(8, 6), (7, 5), (4, 2), (3, 1), (6, 3)])
def test_grey_image_maps_luma_to_rgb(dst):
    width, height = 8, 6
    src = make_yuv(width, height, [(i * 7) % 256 for i in range(width * height)])
    dst_info = StreamInfo(dst[0], dst[1], dst[0] * 3)
    out = yuv420_to_rgb(src, StreamInfo(width, height, width), dst_info)
    assert len(out) == dst_info.height * dst_info.stride
    for row in range(dst_info.height):
        line = out[row * dst_info.stride:(row + 1) * dst_info.stride]
        reds, greens, blues = line[0::3], line[1::3], line[2::3]
        assert reds == greens == blues


def test_centre_crop():
    width, height = 8, 6
    plane = [200 if 2 <= r < 4 and 2 <= c < 6 else 50 for r in range(height) for c in range(width)]
    src = make_yuv(width, height, plane)
    out = yuv420_to_rgb(src, StreamInfo(width, height, width), StreamInfo(4, 2, 12))
    assert set(out) == {200}


def test_padding_bytes_stay_zero():
    src = make_yuv(4, 2, [100] * 8)
    out = yuv420_to_rgb(src, StreamInfo(4, 2, 4), StreamInfo(4, 2, 16))
    for row in range(2):
        line = out[row * 16:(row + 1) * 16]
        assert set(line[:12]) == {100}
        assert set(line[12:]) == {0}


def test_values_clamped():
    src = make_yuv(4, 2, [255] * 8, u=128, v=255)
    out = yuv420_to_rgb(src, StreamInfo(4, 2, 4), StreamInfo(4, 2, 12))
    assert set(out[0::3]) == {255}
    dark = make_yuv(4, 2, [0] * 8, u=0, v=128)
    out = yuv420_to_rgb(dark, StreamInfo(4, 2, 4), StreamInfo(4, 2, 12))
    assert set(out[2::3]) == {0}


def test_destination_larger_than_source_rejected():
    src = make_yuv(4, 2, [0] * 8)
    with pytest.raises(ValueError):
        yuv420_to_rgb(src, StreamInfo(4, 2, 4), StreamInfo(6, 2, 18))


def test_short_source_rejected():
    with pytest.raises(ValueError):
        yuv420_to_rgb(bytes(8), StreamInfo(4, 2, 4), StreamInfo(4, 2, 12))


def test_get_json_array_padding():
    params = {"values": [1, 2]}
    assert get_json_array(params, "values", [9, 9, 9, 9]) == [1, 2, 9, 9]
    assert get_json_array(params, "missing", [4, 5]) == [4, 5]
    assert get_json_array({"values": [1, 2, 3]}, "values", [0]) == [1, 2, 3]
    assert get_json_array(params, "missing") == []


def test_execution_time_calls_function():
    calls = []
    elapsed = execution_time(lambda a, b: calls.append((a, b)), 1, "x")
    assert calls == [(1, "x")]
    assert elapsed >= 0


def test_registry_registers_and_replaces():
    register_stage("test_registry_stage", DummyStage)
    stages = get_post_processing_stages()
    assert stages["test_registry_stage"] is DummyStage

    def other(app):
        return DummyStage(app)

    register_stage("test_registry_stage", other)
    assert get_post_processing_stages()["test_registry_stage"] is other
    with pytest.raises(TypeError):
        stages["x"] = other


def test_base_stage_is_abstract():
    with pytest.raises(TypeError):
        PostProcessingStage(None)


def test_default_hooks_and_app():
    app = object()
    register_stage("test_hooks_stage", DummyStage)
    stage = get_post_processing_stages()["test_hooks_stage"](app)
    assert stage.app is app
    assert stage.name() == "dummy"
    assert PostProcessingStage.read(stage, {"a": 1}) is None
    assert PostProcessingStage.adjust_config(stage, "video", None) is None
    assert PostProcessingStage.configure(stage) is None
    assert PostProcessingStage.start(stage) is None
    assert PostProcessingStage.stop(stage) is None
    assert PostProcessingStage.teardown(stage) is None
    assert stage.process(None) is False