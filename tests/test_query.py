"""
Query Formatter tests.

Assertions decode the query string so they read in SoQL terms; a few tests
check the raw encoding explicitly.
"""

from urllib.parse import unquote_plus

import pytest

from socrata_features.exceptions import InvalidQueryError
from socrata_features.models import QueryParameters
from socrata_features.query import format_query, parse_order_by, extent_query


def clauses(qs):
    return [unquote_plus(part) for part in qs.split("&")]


# ============================================================================
# TestDefaults
# ============================================================================

class TestDefaults:
    """No parameters: select everything, order by :id."""

    def test_empty_query(self):
        assert clauses(format_query({})) == ["$select=:*,*", "$order=:id asc"]

    def test_none_query(self):
        assert format_query(None) == format_query({})

    def test_default_order_is_plus_encoded(self):
        assert format_query({}).endswith("$order=:id+asc")

    @pytest.mark.parametrize("query", [
        {},
        {"where": "a = 1"},
        {"resultOffset": "10", "resultRecordCount": "5"},
        {"where": "b > 2", "resultRecordCount": "1"},
    ])
    def test_default_order_appears_exactly_once(self, query):
        assert clauses(format_query(query)).count("$order=:id asc") == 1

    def test_select_always_first(self):
        assert clauses(format_query({"where": "x = 1"}))[0] == "$select=:*,*"


# ============================================================================
# TestOptionalClauses
# ============================================================================

class TestOptionalClauses:
    """where / offset / limit only when present and non-empty."""

    def test_no_offset_clause_without_result_offset(self):
        for query in ({}, {"resultRecordCount": "10"}, {"where": "a = 1"}):
            assert not any(c.startswith("$offset") for c in clauses(format_query(query)))

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_values_are_absent(self, value):
        qs = format_query({"where": value, "resultOffset": value, "resultRecordCount": value})
        assert clauses(qs) == ["$select=:*,*", "$order=:id asc"]

    def test_all_clauses_in_order(self):
        qs = format_query({
            "where": "status = 'open'",
            "resultOffset": "20",
            "resultRecordCount": "10",
        })
        assert clauses(qs) == [
            "$select=:*,*",
            "$where=status = 'open'",
            "$offset=20",
            "$limit=10",
            "$order=:id asc",
        ]

    def test_zero_offset_is_kept(self):
        assert "$offset=0" in clauses(format_query({"resultOffset": "0"}))

    def test_integer_values_accepted(self):
        assert "$limit=25" in clauses(format_query({"resultRecordCount": 25}))

    def test_accepts_model(self):
        params = QueryParameters(resultRecordCount="3")
        assert "$limit=3" in clauses(format_query(params))

    @pytest.mark.parametrize("field", ["resultOffset", "resultRecordCount"])
    @pytest.mark.parametrize("value", ["ten", "-1", "1.5"])
    def test_non_integer_paging_rejected(self, field, value):
        with pytest.raises(InvalidQueryError):
            format_query({field: value})


# ============================================================================
# TestEncoding
# ============================================================================

class TestEncoding:
    """User input cannot break out of its clause."""

    def test_where_is_encoded(self):
        qs = format_query({"where": "name = 'a&b' AND x=1"})
        assert "&b'" not in qs
        assert "$where=name+%3D+%27a%26b%27+AND+x%3D1" in qs.split("&")

    def test_injected_parameter_stays_inside_where(self):
        qs = format_query({"where": "1=1&$limit=999999"})
        assert len(qs.split("&")) == 3
        assert not any(part.startswith("$limit") for part in qs.split("&"))

    def test_extent_query(self):
        assert extent_query("the_geom") == "$select=extent(the_geom)"


# ============================================================================
# TestOrderBy
# ============================================================================

class TestOrderBy:
    """Esri orderByFields translated to SoQL $order."""

    def test_parse_mixed(self):
        assert parse_order_by("name ASC, date desc") == [("name", "ASC"), ("date", "DESC")]

    def test_parse_default_direction(self):
        assert parse_order_by("name") == [("name", "ASC")]

    def test_system_field(self):
        assert parse_order_by(":updated_at DESC") == [(":updated_at", "DESC")]

    def test_explicit_order_replaces_default(self):
        result = clauses(format_query({"orderByFields": "name ASC,date DESC"}))
        assert "$order=name ASC,date DESC" in result
        assert "$order=:id asc" not in result

    @pytest.mark.parametrize("value", [
        "name SIDEWAYS",
        "name; drop",
        "name ASC extra",
        "1name",
        " , ",
    ])
    def test_malformed_rejected(self, value):
        with pytest.raises(InvalidQueryError):
            parse_order_by(value)
