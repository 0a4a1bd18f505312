"""Stage that sends object detection results as UDP datagrams."""

from __future__ import annotations

import logging
import socket
import struct
from collections.abc import Mapping
from typing import Any

from camstages.detection import Detection, Rectangle
from camstages.stage import PostProcessingStage, register_stage

log = logging.getLogger(__name__)

NAME = "object_detect_udp"

# Sent little-endian, so the first bytes on the wire are AA BB CC DD.
START_DELIMITER = 0xDDCCBBAA
NAME_FIELD_LENGTH = 255
# The name field keeps at most this many bytes of the name; the rest is zero.
MAX_NAME_BYTES = NAME_FIELD_LENGTH - 2

DEFAULT_IP = "127.0.0.1"
DEFAULT_PORT = 12347

_WIRE = struct.Struct(f"<I4iB{NAME_FIELD_LENGTH}sf")
MESSAGE_SIZE = _WIRE.size


def encode_detection(detection: Detection) -> bytes:
    """Encode one detection as a datagram payload."""
    box = detection.box
    name = detection.name.encode("utf-8")[:MAX_NAME_BYTES]
    return _WIRE.pack(
        START_DELIMITER,
        box.x,
        box.y,
        box.width,
        box.height,
        NAME_FIELD_LENGTH,
        name,
        detection.confidence,
    )


def decode_detection(data: bytes) -> Detection:
    """Decode a datagram payload; the category is not sent and comes back as 0."""
    if len(data) != MESSAGE_SIZE:
        raise ValueError(f"expected {MESSAGE_SIZE} bytes, got {len(data)}")
    delimiter, x, y, width, height, name_length, raw_name, confidence = _WIRE.unpack(data)
    if delimiter != START_DELIMITER:
        raise ValueError("missing start delimiter")
    if name_length != NAME_FIELD_LENGTH:
        raise ValueError(f"unexpected name field length {name_length}")
    name = raw_name.split(b"\0", 1)[0].decode("utf-8", errors="replace")
    return Detection(0, name, confidence, Rectangle(x, y, width, height))


class ObjectDetectUdpStage(PostProcessingStage):
    """Sends each entry of "object_detect.results" to a UDP address."""

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self.address = DEFAULT_IP
        self.port = 12345
        self._stream: Any = None
        self._sock: socket.socket | None = None

    def name(self) -> str:
        return NAME

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def read(self, params: Mapping[str, Any]) -> None:
        self.address = str(params.get("ip", DEFAULT_IP))
        port = int(params.get("port", DEFAULT_PORT))
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port {port} out of range")
        self.port = port

    def configure(self) -> None:
        self._stream = self.app.get_main_stream()
        self.close()
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as exc:
            log.error("UDP socket creation failed: %s", exc)
            return
        try:
            socket.inet_pton(socket.AF_INET, self.address)
        except OSError:
            log.error("Invalid address/ Address not supported: %s", self.address)
            sock.close()
            return
        self._sock = sock
        log.info("UDP socket initialized for IP: %s, Port: %d", self.address, self.port)

    def process(self, completed_request: Any) -> bool:
        if not self._stream:
            return False
        detections = completed_request.post_process_metadata.get("object_detect.results", [])
        if self._sock is None:
            return False
        for detection in detections:
            try:
                self._sock.sendto(encode_detection(detection), (self.address, self.port))
            except OSError as exc:
                log.error("Failed to send UDP message: %s", exc)
        return False

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None
            log.info("UDP socket closed.")

    def __enter__(self) -> ObjectDetectUdpStage:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


register_stage(NAME, ObjectDetectUdpStage)