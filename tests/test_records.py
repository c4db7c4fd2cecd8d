"""Tests for the pure record/embed builders

These cover the normalization rules applied before anything is sent:
- createdAt formatting and pass-through
- default vs. explicit-empty language lists
- ALT text / mime type padding and truncation
- images/video embed shapes
"""

from datetime import date, datetime, timedelta, timezone

import pytest
from freezegun import freeze_time

from bskyclient.errors import EmbedValidationError
from bskyclient.records import (
    build_images_embed,
    build_post_record,
    build_video_embed,
    coerce_langs,
    coerce_timestamp,
    embed_to_dict,
    normalize_alts,
    normalize_mime_types,
)
from bskyclient.types import (
    ASPECT_RATIO_TYPE,
    FEED_POST_TYPE,
    IMAGE_BLOCK_TYPE,
    IMAGES_EMBED_TYPE,
    VIDEO_EMBED_TYPE,
    AspectRatio,
)
from tests.conftest import make_blob


class TestCoerceTimestamp:
    def test_string_passes_through_unchanged(self):
        assert coerce_timestamp("2024-04-01T10:00:00.000Z") == "2024-04-01T10:00:00.000Z"

    def test_string_is_not_validated(self):
        assert coerce_timestamp("not a date") == "not a date"

    def test_naive_datetime_is_treated_as_utc(self):
        formatted = coerce_timestamp(datetime(2024, 4, 1, 12, 30, 45))
        assert formatted.startswith("2024-04-01T12:30:45")
        assert formatted.endswith("Z")
        assert formatted == "2024-04-01T12:30:45.000Z"

    def test_milliseconds_are_truncated_to_three_digits(self):
        assert coerce_timestamp(datetime(2024, 4, 1, 12, 30, 45, 123987)) == "2024-04-01T12:30:45.123Z"

    def test_aware_datetime_is_converted_to_utc(self):
        eastern = timezone(timedelta(hours=-4))
        assert coerce_timestamp(datetime(2024, 4, 1, 8, 0, 0, tzinfo=eastern)) == "2024-04-01T12:00:00.000Z"

    def test_date_becomes_midnight_utc(self):
        assert coerce_timestamp(date(2024, 4, 1)) == "2024-04-01T00:00:00.000Z"

    @freeze_time("2025-10-31 20:00:00.250")
    def test_none_uses_current_utc_time(self):
        assert coerce_timestamp() == "2025-10-31T20:00:00.250Z"
        assert coerce_timestamp(None) == "2025-10-31T20:00:00.250Z"

    def test_unsupported_type_raises(self):
        with pytest.raises(TypeError):
            coerce_timestamp(1711972800)


class TestCoerceLangs:
    def test_none_defaults_to_english(self):
        assert coerce_langs(None) == ["en"]
        assert coerce_langs() == ["en"]

    def test_explicit_empty_list_stays_empty(self):
        assert coerce_langs([]) == []

    def test_order_is_preserved(self):
        assert coerce_langs(["en", "ja"]) == ["en", "ja"]

    def test_tuple_is_copied_to_list(self):
        assert coerce_langs(("de", "fr")) == ["de", "fr"]

    def test_bare_string_is_one_language(self):
        assert coerce_langs("ja") == ["ja"]


class TestBuildPostRecord:
    def test_text_only_record_has_exact_keys(self):
        record = build_post_record("Hello", "2024-04-01T12:00:00.000Z", ["en", "es"], None)

        assert record == {
            "$type": FEED_POST_TYPE,
            "text": "Hello",
            "createdAt": "2024-04-01T12:00:00.000Z",
            "langs": ["en", "es"],
        }
        assert "embed" not in record

    def test_empty_langs_omits_key(self):
        record = build_post_record("Hello", "2024-04-01T12:00:00.000Z", [])
        assert "langs" not in record

    def test_typed_embed_is_serialized(self):
        embed = build_video_embed(make_blob(mime_type="video/mp4"))
        record = build_post_record("clip", "2024-04-01T12:00:00.000Z", ["en"], embed)
        assert record["embed"]["$type"] == VIDEO_EMBED_TYPE

    def test_mapping_embed_is_copied_verbatim(self):
        raw = {"$type": VIDEO_EMBED_TYPE, "video": make_blob(), "aspectRatio": {"width": 16, "height": 9}}
        record = build_post_record("clip", "2024-04-01T12:00:00.000Z", ["en"], raw)
        assert record["embed"] == raw

    def test_unsupported_embed_raises(self):
        with pytest.raises(TypeError):
            build_post_record("x", "2024-04-01T12:00:00.000Z", ["en"], ["not", "an", "embed"])

    def test_embed_to_dict_none(self):
        assert embed_to_dict(None) is None


class TestNormalizeAlts:
    def test_pads_with_empty_strings(self):
        assert normalize_alts(["alt 1"], 2) == ["alt 1", ""]

    def test_truncates_surplus(self):
        assert normalize_alts(["a", "b", "c"], 2) == ["a", "b"]

    def test_none_fills_all(self):
        assert normalize_alts(None, 3) == ["", "", ""]

    def test_exact_count_unchanged(self):
        assert normalize_alts(["a", "b"], 2) == ["a", "b"]

    def test_bare_string_is_one_alt(self):
        assert normalize_alts("A cat", 2) == ["A cat", ""]


class TestNormalizeMimeTypes:
    def test_pads_with_jpeg(self):
        assert normalize_mime_types(["image/png"], 3) == ["image/png", "image/jpeg", "image/jpeg"]

    def test_none_fills_with_jpeg(self):
        assert normalize_mime_types(None, 2) == ["image/jpeg", "image/jpeg"]

    def test_empty_fills_with_jpeg(self):
        assert normalize_mime_types([], 2) == ["image/jpeg", "image/jpeg"]

    def test_truncates_surplus(self):
        assert normalize_mime_types(["image/png", "image/gif", "image/webp"], 1) == ["image/png"]

    def test_bare_string_is_one_mime_type(self):
        assert normalize_mime_types("image/png", 2) == ["image/png", "image/jpeg"]


class TestImagesEmbed:
    def test_pairs_blobs_and_alts_in_order(self):
        blobs = [make_blob(link=f"bafy{i}") for i in range(3)]
        alts = ["first", "second", "third"]

        embed = build_images_embed(blobs, alts).to_dict()

        assert embed["$type"] == IMAGES_EMBED_TYPE
        assert len(embed["images"]) == 3
        for i, entry in enumerate(embed["images"]):
            assert entry == {"$type": IMAGE_BLOCK_TYPE, "image": blobs[i], "alt": alts[i]}

    def test_mismatched_counts_rejected(self):
        with pytest.raises(EmbedValidationError):
            build_images_embed([make_blob(), make_blob()], ["only one"])

    def test_more_than_four_rejected(self):
        with pytest.raises(EmbedValidationError):
            build_images_embed([make_blob()] * 5, [""] * 5)

    def test_empty_rejected(self):
        with pytest.raises(EmbedValidationError):
            build_images_embed([], [])


class TestVideoEmbed:
    def test_empty_alt_and_no_ratio_are_omitted(self):
        blob = make_blob(mime_type="video/mp4")
        assert build_video_embed(blob, "").to_dict() == {"$type": VIDEO_EMBED_TYPE, "video": blob}

    def test_alt_and_ratio_included(self):
        blob = make_blob(mime_type="video/mp4")
        embed = build_video_embed(blob, "A spinning circle", AspectRatio(16, 9)).to_dict()

        assert embed["alt"] == "A spinning circle"
        assert embed["aspectRatio"] == {"$type": ASPECT_RATIO_TYPE, "width": 16, "height": 9}


class TestAspectRatio:
    @pytest.mark.parametrize("width,height", [(0, 10), (10, -1), (0, 0), (-5, 5)])
    def test_non_positive_sides_rejected_at_construction(self, width, height):
        with pytest.raises(ValueError):
            AspectRatio(width, height)

    @pytest.mark.parametrize("width,height", [(16.5, 9), (16, 9.0), ("16", 9), (True, 1)])
    def test_non_integer_sides_rejected(self, width, height):
        with pytest.raises(TypeError):
            AspectRatio(width, height)

    def test_minimum_is_one(self):
        ratio = AspectRatio(1, 1)
        assert (ratio.width, ratio.height) == (1, 1)
