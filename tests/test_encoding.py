"""
Tests for identifier sanitizing and request encoding
"""

import pytest

from creatordb_proxy.encoding import (
    encode_nls_body,
    encode_query,
    encode_search_body,
    sanitize_id,
    validate_filters,
)
from creatordb_proxy.errors import InvalidArgumentError, MissingParameterError


FOLLOWERS_FILTER = {"filterName": "totalFollowers", "op": ">", "value": 100000}


class TestSanitizeId:
    """Tests for sanitize_id"""

    def test_strips_leading_at(self):
        """@handle and handle sanitize to the same value"""
        assert sanitize_id("@tiktok") == sanitize_id("tiktok") == "tiktok"

    def test_strips_only_one_at(self):
        assert sanitize_id("@@tiktok") == "%40tiktok"

    def test_inner_at_is_encoded_not_stripped(self):
        assert sanitize_id("brand@shop") == "brand%40shop"

    def test_percent_encodes_reserved_characters(self):
        assert sanitize_id("a b&c=d/e?") == "a%20b%26c%3Dd%2Fe%3F"

    def test_keeps_uri_component_safe_characters(self):
        assert sanitize_id("user.name_1-x~!*'()") == "user.name_1-x~!*'()"

    def test_encodes_unicode(self):
        assert sanitize_id("café") == "caf%C3%A9"

    def test_empty_string(self):
        assert sanitize_id("") == ""
        assert sanitize_id("@") == ""

    def test_lone_surrogate_is_encoded(self):
        """Every string sanitizes, even ones that are not valid UTF-8"""
        assert sanitize_id("@ab\ud800") == "ab%ED%A0%80"


class TestEncodeQuery:
    """Tests for encode_query"""

    def test_omits_absent_values(self):
        assert encode_query({"start": None, "end": "1700000000000"}) == "end=1700000000000"

    def test_empty_when_nothing_present(self):
        assert encode_query({"start": None, "end": None}) == ""

    def test_keeps_falsy_but_present_values(self):
        """0, False and "" are values, not absence"""
        assert encode_query({"a": 0, "b": False, "c": ""}) == "a=0&b=false&c="

    def test_preserves_order(self):
        assert encode_query({"z": "1", "a": "2"}) == "z=1&a=2"

    def test_identifier_keys_are_sanitized(self):
        query = encode_query({"uniqueId": "@nike", "other": "@nike"}, identifier_keys=["uniqueId"])
        assert query == "uniqueId=nike&other=%40nike"

    def test_rejects_structured_values(self):
        with pytest.raises(InvalidArgumentError):
            encode_query({"uniqueId": ["a", "b"]})


class TestValidateFilters:
    """Tests for filter shape validation"""

    def test_missing_filters(self):
        with pytest.raises(MissingParameterError) as exc_info:
            validate_filters(None)
        assert exc_info.value.parameter == "filters"

    def test_filters_must_be_a_list(self):
        with pytest.raises(InvalidArgumentError):
            validate_filters({"filterName": "country", "op": "=", "value": "US"})

    def test_empty_list_is_allowed(self):
        assert validate_filters([]) == []

    def test_at_most_ten_filters(self):
        validate_filters([FOLLOWERS_FILTER] * 10)
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_filters([FOLLOWERS_FILTER] * 11)
        assert "10" in str(exc_info.value)

    def test_in_requires_list_value(self):
        with pytest.raises(InvalidArgumentError):
            validate_filters([{"filterName": "country", "op": "in", "value": "US"}])

    def test_comparison_requires_scalar_value(self):
        with pytest.raises(InvalidArgumentError):
            validate_filters([{"filterName": "country", "op": "=", "value": ["US"]}])

    def test_unknown_operator(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_filters([{"filterName": "country", "op": "!=", "value": "US"}])
        assert exc_info.value.parameter == "filters[0]"

    def test_missing_filter_name(self):
        with pytest.raises(InvalidArgumentError):
            validate_filters([{"op": "=", "value": "US"}])

    def test_entry_must_be_object(self):
        with pytest.raises(InvalidArgumentError):
            validate_filters(["country=US"])

    def test_valid_filters_pass_through_unchanged(self):
        filters = [
            {"filterName": "country", "op": "in", "value": ["US", "CA"]},
            {"filterName": "displayName", "op": "=", "value": "nike", "isFuzzySearch": True},
            {"filterName": "isVerified", "op": "=", "value": False},
            {"filterName": "avgEngagementRate", "op": "<", "value": 0.05, "extraKey": 1},
        ]
        assert validate_filters(filters) is filters
        assert filters[3]["extraKey"] == 1


class TestEncodeSearchBody:
    """Tests for encode_search_body"""

    def test_applies_defaults(self):
        body = encode_search_body({"filters": [FOLLOWERS_FILTER]})
        assert body == {
            "filters": [FOLLOWERS_FILTER],
            "pageSize": 20,
            "offset": 0,
            "desc": True,
        }
        assert "sortBy" not in body

    def test_keeps_explicit_falsy_values(self):
        """desc=False must not be replaced by the default"""
        body = encode_search_body({"filters": [], "offset": 0, "desc": False})
        assert body["offset"] == 0
        assert body["desc"] is False

    def test_includes_sort_by_when_present(self):
        body = encode_search_body({"filters": [], "sortBy": "totalFollowers", "pageSize": 50, "offset": 100})
        assert body == {
            "filters": [],
            "pageSize": 50,
            "offset": 100,
            "sortBy": "totalFollowers",
            "desc": True,
        }

    def test_filters_required(self):
        with pytest.raises(MissingParameterError):
            encode_search_body({"pageSize": 20})

    @pytest.mark.parametrize("page_size", [0, 101, -1])
    def test_page_size_out_of_range(self, page_size):
        with pytest.raises(InvalidArgumentError):
            encode_search_body({"filters": [], "pageSize": page_size})

    def test_page_size_must_be_integer(self):
        with pytest.raises(InvalidArgumentError):
            encode_search_body({"filters": [], "pageSize": "20"})

    def test_whole_number_floats_accepted(self):
        body = encode_search_body({"filters": [], "pageSize": 20.0, "offset": 40.0})
        assert body["pageSize"] == 20
        assert isinstance(body["pageSize"], int)
        assert body["offset"] == 40

    def test_fractional_page_size_rejected(self):
        with pytest.raises(InvalidArgumentError):
            encode_search_body({"filters": [], "pageSize": 20.5})

    def test_negative_offset(self):
        with pytest.raises(InvalidArgumentError):
            encode_search_body({"filters": [], "offset": -5})

    def test_desc_must_be_boolean(self):
        with pytest.raises(InvalidArgumentError):
            encode_search_body({"filters": [], "desc": "yes"})


class TestEncodeNlsBody:
    """Tests for encode_nls_body"""

    def test_exact_shape_with_defaults(self):
        body = encode_nls_body({"query": "fashion influencers in USA", "sortBy": "ignored"})
        assert body == {"query": "fashion influencers in USA", "pageSize": 20, "offset": 0}

    def test_explicit_paging(self):
        body = encode_nls_body({"query": "q", "pageSize": 5, "offset": 0})
        assert body == {"query": "q", "pageSize": 5, "offset": 0}

    def test_query_required(self):
        with pytest.raises(MissingParameterError):
            encode_nls_body({})
        with pytest.raises(MissingParameterError):
            encode_nls_body({"query": ""})

    def test_query_must_be_string(self):
        with pytest.raises(InvalidArgumentError):
            encode_nls_body({"query": 42})
