from __future__ import annotations

import base64
import threading
import time

import pytest

from rook_web.domain.errors import MediaError
from rook_web.domain.models import MediaItem
from rook_web.services.media_encoder import MediaEncoder, classify, remove, split_data_uri


@pytest.mark.parametrize(
    "mime, expected",
    [
        ("video/mp4", "video"),
        ("video/quicktime", "video"),
        ("image/png", "image"),
        ("application/pdf", "image"),   # anything that is not video is treated as an image
        ("", "image"),
    ],
)
def test_classify(mime, expected):
    assert classify(mime) == expected


def test_encode_builds_data_uri_from_declared_type(upload):
    enc = MediaEncoder(id_factory=lambda: "fixed")
    item = enc.encode(upload("shot.png", b"\x89PNG", mimetype="image/png"))

    assert item == MediaItem(id="fixed", kind="image", payload="data:image/png;base64," + base64.b64encode(b"\x89PNG").decode())


def test_encode_guesses_type_from_filename(upload):
    item = MediaEncoder().encode(upload("ad.mp4", b"....", mimetype=None))
    assert item.kind == "video"
    assert item.payload.startswith("data:video/mp4;base64,")


def test_encode_ids_are_unique(upload):
    enc = MediaEncoder()
    ids = {enc.encode(upload("a.png", b"x", "image/png")).id for _ in range(20)}
    assert len(ids) == 20


def test_encode_read_failure_is_media_error(upload):
    with pytest.raises(MediaError, match="broken.png"):
        MediaEncoder().encode(upload("broken.png", b"", "image/png", fail=True))


def test_encode_many_reports_each_item_and_collects_failures(upload):
    enc = MediaEncoder(max_workers=3)
    seen = []
    failures = enc.encode_many(
        [
            upload("a.png", b"a", "image/png"),
            upload("b.png", b"b", "image/png", fail=True),
            upload("c.mp4", b"c", "video/mp4"),
        ],
        seen.append,
    )

    assert len(failures) == 1
    assert "b.png" in str(failures[0])
    assert sorted(m.kind for m in seen) == ["image", "video"]


class SlowUpload:
    def __init__(self, name: str, delay: float):
        self.filename = name
        self.mimetype = "image/png"
        self.delay = delay

    def read(self) -> bytes:
        time.sleep(self.delay)
        return self.filename.encode()


def test_encode_many_delivers_in_completion_order():
    enc = MediaEncoder(max_workers=2)
    order = []
    enc.encode_many([SlowUpload("slow", 0.3), SlowUpload("fast", 0.0)], lambda m: order.append(m.payload))

    assert base64.b64decode(order[0].split(",", 1)[1]) == b"fast"
    assert base64.b64decode(order[1].split(",", 1)[1]) == b"slow"


def test_encode_many_with_no_files_is_a_no_op():
    called = threading.Event()
    assert MediaEncoder().encode_many([], lambda m: called.set()) == []
    assert not called.is_set()


def test_encode_audio_defaults_to_webm(upload):
    uri = MediaEncoder().encode_audio(upload("blob", b"OggS", mimetype=None))
    assert uri.startswith("data:audio/webm;base64,")


def test_encode_audio_rejects_empty_recording(upload):
    with pytest.raises(MediaError):
        MediaEncoder().encode_audio(upload("rec.webm", b"", "audio/webm"))


def test_remove_filters_by_id_only():
    items = (
        MediaItem(id="1", kind="image", payload="p1"),
        MediaItem(id="2", kind="video", payload="p2"),
        MediaItem(id="3", kind="image", payload="p3"),
    )
    assert [m.id for m in remove(items, "2")] == ["1", "3"]
    assert remove(items, "missing") == items


@pytest.mark.parametrize(
    "uri, expected",
    [
        ("data:image/png;base64,AAAA", ("image/png", "AAAA")),
        ("data:audio/webm;codecs=opus;base64,QUJD", ("audio/webm", "QUJD")),
        ("QUJD", ("application/octet-stream", "QUJD")),
        ("  data:video/mp4;base64,ZZ  ", ("video/mp4", "ZZ")),
    ],
)
def test_split_data_uri(uri, expected):
    assert split_data_uri(uri) == expected


class GarbledUpload:
    filename = "garbled.png"
    mimetype = "image/png"

    def read(self):
        return 12345


def test_unexpected_encode_failure_is_media_error_and_others_continue(upload):
    enc = MediaEncoder(max_workers=2)
    seen = []
    failures = enc.encode_many([GarbledUpload(), upload("ok.png", b"ok", "image/png")], seen.append)

    assert len(failures) == 1
    assert isinstance(failures[0], MediaError)
    assert "garbled.png" in str(failures[0])
    assert len(seen) == 1
