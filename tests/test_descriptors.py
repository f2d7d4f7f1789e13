"""Tests for entity descriptors and field coercion."""

import pytest

from catalog_console.catalog import DEFAULT_MAX_VIDEO_BYTES, build_catalog
from catalog_console.domain.descriptors import (
    AssetConstraints,
    Coercion,
    FieldSpec,
)
from catalog_console.domain.errors import FileTooLarge, InvalidFileType
from tests.conftest import make_file


def test_integer_coercion() -> None:
    spec = FieldSpec("age", "Age", coercion=Coercion.INTEGER)

    assert spec.coerce("34") == 34
    assert spec.coerce(" 7 ") == 7
    assert spec.coerce("") is None
    with pytest.raises(ValueError, match="whole number"):
        spec.coerce("3.5")


@pytest.mark.parametrize("raw", ["0", "6", "-1"])
def test_rating_bounds(raw: str) -> None:
    spec = FieldSpec("rating", "Rating", coercion=Coercion.RATING)

    with pytest.raises(ValueError, match="between 1 and 5"):
        spec.coerce(raw)


def test_count_defaults_to_zero() -> None:
    spec = FieldSpec("views", "Views", coercion=Coercion.COUNT)

    assert spec.coerce("") == 0
    assert spec.coerce("lots") == 0
    assert spec.coerce("1500") == 1500


def test_wildcard_mime_types() -> None:
    constraints = AssetConstraints(frozenset({"image/*"}), 1024)

    assert constraints.accepts("image/png")
    assert constraints.accepts("IMAGE/JPEG")
    assert not constraints.accepts("video/mp4")


def test_constraints_check_type_before_size() -> None:
    constraints = AssetConstraints(frozenset({"video/mp4"}), 10)

    with pytest.raises(InvalidFileType):
        constraints.check(make_file("a.txt", "text/plain", size_bytes=50))
    with pytest.raises(FileTooLarge) as excinfo:
        constraints.check(make_file(size_bytes=11))
    assert excinfo.value.max_size_bytes == 10


def test_testimonial_video_limit() -> None:
    spec = build_catalog()["testimonials"].field("videoUrl")

    assert spec.asset is not None
    assert spec.asset.max_size_bytes == DEFAULT_MAX_VIDEO_BYTES
    assert spec.asset.accepts("video/quicktime")
    assert not spec.asset.accepts("video/x-matroska")


def test_wire_names_round_trip_through_descriptor() -> None:
    descriptor = build_catalog()["testimonials"]

    payload = descriptor.to_wire(
        {"videoUrl": "https://cdn.example/v.mp4", "testimonialText": "Great"},
        record_id=3,
    )
    record = descriptor.from_wire(payload)

    assert payload["id"] == 3
    assert payload["video_url"] == "https://cdn.example/v.mp4"
    assert payload["testimonial"] == "Great"
    assert "videoUrl" not in payload
    assert record.id == 3
    assert record.values["testimonialText"] == "Great"


def test_asset_fields_and_required_fields() -> None:
    catalog = build_catalog()

    assert [spec.name for spec in catalog["videos"].asset_fields] == [
        "thumbnail",
        "videoUrl",
    ]
    assert [spec.name for spec in catalog["videos"].required_fields] == [
        "title",
        "category",
        "videoUrl",
    ]
    assert [spec.name for spec in catalog["success"].required_fields] == [
        "student",
        "age",
    ]
    assert catalog["responses"].read_only


def test_unknown_field_raises_key_error() -> None:
    with pytest.raises(KeyError):
        build_catalog()["videos"].field("student")
