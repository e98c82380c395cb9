"""Access descriptor storage format tests"""

import pytest

from tubely.models.upload import AccessDescriptor
from tubely.services.publisher import build_object_key


def test_composite_round_trip():
    descriptor = AccessDescriptor.composite("tubely-test", "landscape/abc.mp4")

    assert descriptor.serialize() == "tubely-test,landscape/abc.mp4"
    assert AccessDescriptor.parse(descriptor.serialize()) == descriptor
    assert descriptor.is_composite


def test_static_url_is_not_split():
    url = "http://localhost:8091/assets/landscape/abc.mp4?x=1,2"

    descriptor = AccessDescriptor.parse(url)

    assert not descriptor.is_composite
    assert descriptor.serialize() == url


@pytest.mark.parametrize("value", [",key", "bucket,"])
def test_incomplete_composite_is_static(value):
    assert not AccessDescriptor.parse(value).is_composite


def test_object_key_layout():
    key = build_object_key("portrait", "My Clip.MP4", lambda: "f" * 64)

    assert key == "portrait/" + "f" * 64 + ".MP4"


def test_object_key_default_ids_are_random_hex():
    first = build_object_key("landscape", "a.mp4")
    second = build_object_key("landscape", "a.mp4")

    name = first.split("/", 1)[1]
    assert len(name) == 64 + len(".mp4")
    int(name[:64], 16)
    assert first != second


def test_object_key_without_extension():
    assert build_object_key("other", "clip", lambda: "0" * 64) == "other/" + "0" * 64
