from camstages.detection import Detection, Rectangle, Segmentation


def test_detection_string_format():
    detection = Detection(1, "person", 0.87, Rectangle(10, 20, 30, 40))
    assert str(detection) == "person[1] (0.87) @ 10,20 30x40"


def test_detection_confidence_uses_two_significant_digits():
    detection = Detection(3, "cat", 0.876, Rectangle(0, 0, 5, 6))
    assert str(detection) == "cat[3] (0.88) @ 0,0 5x6"


def test_detection_default_box_is_empty():
    detection = Detection(2, "dog", 0.5)
    assert detection.box == Rectangle(0, 0, 0, 0)
    assert str(detection).startswith("dog[2] (0.5)")


def test_segmentation_holds_fields():
    seg = Segmentation(4, 2, ["a", "b"], bytes([0, 1, 1, 0, 1, 0, 0, 1]))
    assert seg.width == 4
    assert seg.height == 2
    assert seg.labels == ["a", "b"]
    assert len(seg.segmentation) == seg.width * seg.height
    assert seg == Segmentation(4, 2, ["a", "b"], bytes([0, 1, 1, 0, 1, 0, 0, 1]))