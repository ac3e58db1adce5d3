"""Tests for newshub.ingestion.normalize — provider field maps and fallbacks."""

from __future__ import annotations

import pytest

from newshub.ingestion.normalize import (
    UNKNOWN_AUTHOR,
    ArticleCandidate,
    NormalizationError,
    normalize,
    normalize_timestamp,
)


def _headlines(**overrides) -> dict:
    record = {
        "source": {"id": "bbc-news", "name": "BBC News"},
        "author": "Jane Reporter",
        "title": "Markets rally",
        "description": "Short description.",
        "url": "https://example.com/a",
        "publishedAt": "2024-01-01T00:00:00Z",
        "content": "Full content.",
    }
    record.update(overrides)
    return record


def _editorial(**overrides) -> dict:
    record = {
        "id": "world/2024/jan/01/story",
        "sectionName": "World news",
        "webTitle": "Guardian story",
        "webPublicationDate": "2024-01-01T09:30:00Z",
        "fields": {"bodyText": "Body text.", "byline": "Sam Writer"},
    }
    record.update(overrides)
    return record


def _digest(**overrides) -> dict:
    record = {
        "section": "us",
        "title": "NYT story",
        "abstract": "An abstract.",
        "byline": "By Alex Times",
        "published_date": "2024-01-01T05:00:03-05:00",
    }
    record.update(overrides)
    return record


# --- Headlines ---


class TestHeadlines:
    def test_full_record(self):
        result = normalize(_headlines(), "headlines")
        assert result == ArticleCandidate(
            title="Markets rally",
            content="Full content.",
            author="Jane Reporter",
            published_at="2024-01-01T00:00:00+00:00",
            source="BBC News",
            category=None,
        )

    def test_missing_author_defaults_to_unknown(self):
        record = _headlines()
        del record["author"]
        assert normalize(record, "headlines").author == UNKNOWN_AUTHOR

    def test_null_author_defaults_to_unknown(self):
        assert normalize(_headlines(author=None), "headlines").author == "Unknown"

    def test_content_falls_back_to_description(self):
        record = _headlines()
        del record["content"]
        assert normalize(record, "headlines").content == "Short description."

    def test_null_content_falls_back_to_description(self):
        assert normalize(_headlines(content=None), "headlines").content == "Short description."

    def test_content_empty_when_neither_present(self):
        record = _headlines(content=None)
        del record["description"]
        assert normalize(record, "headlines").content == ""

    def test_empty_content_string_is_kept(self):
        assert normalize(_headlines(content=""), "headlines").content == ""

    def test_source_defaults_when_missing(self):
        record = _headlines()
        del record["source"]
        assert normalize(record, "headlines").source == "NewsAPI"


# --- Editorial ---


class TestEditorial:
    def test_nested_fields(self):
        result = normalize(_editorial(), "editorial")
        assert result.title == "Guardian story"
        assert result.content == "Body text."
        assert result.author == "Sam Writer"
        assert result.published_at == "2024-01-01T09:30:00+00:00"
        assert result.source == "The Guardian"
        assert result.category == "World news"

    def test_missing_fields_object(self):
        record = _editorial()
        del record["fields"]
        result = normalize(record, "editorial")
        assert result.content == ""
        assert result.author == "Unknown"

    def test_missing_byline_only(self):
        result = normalize(_editorial(fields={"bodyText": "Body."}), "editorial")
        assert result.content == "Body."
        assert result.author == "Unknown"

    def test_ignores_top_level_title_key(self):
        record = _editorial(title="Not the title")
        assert normalize(record, "editorial").title == "Guardian story"


# --- Digest ---


class TestDigest:
    def test_offset_converted_to_utc(self):
        result = normalize(_digest(), "digest")
        assert result.published_at == "2024-01-01T10:00:03+00:00"
        assert result.content == "An abstract."
        assert result.author == "By Alex Times"
        assert result.source == "The New York Times"
        assert result.category == "us"

    def test_missing_abstract_and_byline(self):
        record = _digest()
        del record["abstract"]
        del record["byline"]
        result = normalize(record, "digest")
        assert result.content == ""
        assert result.author == "Unknown"

    def test_blank_byline_becomes_unknown(self):
        assert normalize(_digest(byline=""), "digest").author == "Unknown"

    def test_empty_section_becomes_none(self):
        assert normalize(_digest(section=""), "digest").category is None


# --- Required fields ---


class TestRequiredFields:
    def test_missing_title_raises(self):
        record = _headlines()
        del record["title"]
        with pytest.raises(NormalizationError, match="title"):
            normalize(record, "headlines")

    def test_blank_title_raises(self):
        with pytest.raises(NormalizationError):
            normalize(_editorial(webTitle="   "), "editorial")

    def test_missing_timestamp_raises(self):
        record = _digest()
        del record["published_date"]
        with pytest.raises(NormalizationError, match="published_date"):
            normalize(record, "digest")

    def test_unparseable_timestamp_raises(self):
        with pytest.raises(NormalizationError, match="invalid timestamp"):
            normalize(_headlines(publishedAt="yesterday"), "headlines")

    def test_unknown_source_kind(self):
        with pytest.raises(ValueError, match="Unknown source kind"):
            normalize(_headlines(), "rss")

    def test_normalization_error_is_value_error(self):
        assert issubclass(NormalizationError, ValueError)


# --- Purity ---


class TestPurity:
    def test_same_input_same_output(self):
        record = _headlines()
        assert normalize(record, "headlines") == normalize(record, "headlines")

    def test_does_not_mutate_input(self):
        record = _editorial()
        snapshot = {**record, "fields": dict(record["fields"])}
        normalize(record, "editorial")
        assert record == snapshot

    def test_title_whitespace_stripped(self):
        assert normalize(_headlines(title="  Spaced  "), "headlines").title == "Spaced"


# --- Timestamps ---


class TestNormalizeTimestamp:
    def test_z_suffix(self):
        assert normalize_timestamp("2024-01-01T00:00:00Z") == "2024-01-01T00:00:00+00:00"

    def test_naive_assumed_utc(self):
        assert normalize_timestamp("2024-01-01T12:00:00") == "2024-01-01T12:00:00+00:00"

    def test_z_and_offset_forms_agree(self):
        assert normalize_timestamp("2024-01-01T05:00:00+05:00") == normalize_timestamp(
            "2024-01-01T00:00:00Z"
        )

    def test_invalid(self):
        with pytest.raises(ValueError):
            normalize_timestamp("not a date")

    def test_seven_fraction_digits_truncated_to_microseconds(self):
        assert normalize_timestamp("2024-01-01T00:00:00.1234567Z") == (
            "2024-01-01T00:00:00.123456+00:00"
        )

    def test_single_fraction_digit(self):
        assert normalize_timestamp("2024-01-01T00:00:00.5Z") == "2024-01-01T00:00:00.500000+00:00"

    def test_out_of_range_after_utc_conversion(self):
        with pytest.raises(ValueError, match="out of range"):
            normalize_timestamp("9999-12-31T23:00:00-05:00")

    def test_out_of_range_record_is_normalization_error(self):
        with pytest.raises(NormalizationError, match="invalid timestamp"):
            normalize(_headlines(publishedAt="9999-12-31T23:00:00-05:00"), "headlines")
