"""
Metadata Fetcher and envelope tests.
"""

import logging

import pytest

from socrata_features.exceptions import UpstreamUnreachableError
from socrata_features.metadata import (
    fetch_columns,
    fetch_descriptive,
    geometry_columns,
    geometry_type,
)
from socrata_features.models import DescriptiveMetadata, MetadataEnvelope

from tests.factories.socrata_factories import HOST, GEOM_COLUMNS


class TestGeometryColumns:

    @pytest.mark.parametrize("type_name", [
        "point", "line", "polygon", "multipoint", "multiline", "multipolygon",
    ])
    def test_each_geometry_type_detected(self, type_name):
        columns = [{"fieldName": "g", "dataTypeName": type_name}]
        assert geometry_columns(columns) == columns

    @pytest.mark.parametrize("type_name", ["text", "number", "location", "calendar_date", None])
    def test_non_geometry_types_ignored(self, type_name):
        assert geometry_columns([{"fieldName": "x", "dataTypeName": type_name}]) == []

    def test_order_preserved(self):
        columns = [
            {"fieldName": "a", "dataTypeName": "polygon"},
            {"fieldName": "b", "dataTypeName": "text"},
            {"fieldName": "c", "dataTypeName": "point"},
        ]
        assert [c["fieldName"] for c in geometry_columns(columns)] == ["a", "c"]

    def test_geometry_type_mapping(self):
        assert geometry_type([{"fieldName": "g", "dataTypeName": "multipolygon"}]) == "MultiPolygon"
        assert geometry_type([{"fieldName": "g", "dataTypeName": "line"}]) == "LineString"
        assert geometry_type([]) is None


class TestFetchColumns:

    def test_reads_columns(self, client, upstream):
        upstream.add("/api/views.json", {"columns": GEOM_COLUMNS}, when="name=abcd-1234")

        assert fetch_columns(client, HOST, "abcd-1234") == GEOM_COLUMNS
        assert upstream.queries_for("/api/views.json") == ["method=getByResourceName&name=abcd-1234"]

    def test_list_wrapped_view(self, client, upstream):
        upstream.add("/api/views.json", [{"columns": GEOM_COLUMNS}])
        assert fetch_columns(client, HOST, "abcd-1234") == GEOM_COLUMNS

    def test_missing_columns(self, client, upstream):
        upstream.add("/api/views.json", {"id": "abcd-1234"})
        assert fetch_columns(client, HOST, "abcd-1234") == []

    def test_failure_keeps_status(self, client, upstream):
        upstream.add("/api/views.json", status=400)
        with pytest.raises(UpstreamUnreachableError) as exc_info:
            fetch_columns(client, HOST, "abcd-1234")
        assert exc_info.value.upstream_status == 400

    @pytest.mark.parametrize("body", [
        [["unexpected"]],
        "unexpected",
        {"columns": [{"fieldName": "a"}, "b"]},
    ])
    def test_malformed_listing_is_502(self, client, upstream, body):
        upstream.add("/api/views.json", body)
        with pytest.raises(UpstreamUnreachableError) as exc_info:
            fetch_columns(client, HOST, "abcd-1234")
        assert exc_info.value.upstream_status == 502


class TestFetchDescriptive:

    def test_reads_fields(self, client, upstream):
        upstream.add("/api/views/metadata/v1/abcd-1234.json", {
            "name": "Street Trees",
            "description": "Trees on public streets",
            "license": "Open Data Commons PDDL",
            "category": "Environment",
        })

        meta = fetch_descriptive(client, HOST, "abcd-1234")

        assert meta == DescriptiveMetadata(
            name="Street Trees",
            description="Trees on public streets",
            license="Open Data Commons PDDL",
        )

    def test_failure_raises(self, client, upstream):
        upstream.add("/api/views/metadata/v1/abcd-1234.json", status=403)
        with pytest.raises(UpstreamUnreachableError):
            fetch_descriptive(client, HOST, "abcd-1234")

    def test_list_body_raises(self, client, upstream):
        upstream.add("/api/views/metadata/v1/abcd-1234.json", [{"name": "Trees"}])
        with pytest.raises(UpstreamUnreachableError) as exc_info:
            fetch_descriptive(client, HOST, "abcd-1234")
        assert exc_info.value.upstream_status == 502

    def test_failure_not_logged_as_error(self, client, upstream, caplog):
        upstream.add("/api/views/metadata/v1/abcd-1234.json", status=500)
        with pytest.raises(UpstreamUnreachableError):
            fetch_descriptive(client, HOST, "abcd-1234")
        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]


class TestMetadataEnvelope:

    def test_build(self):
        envelope = MetadataEnvelope.build(
            DescriptiveMetadata(name="Trees", description="d", license="CC0"),
            organization="the City",
            extent=[[0, 0], [1, 1]],
            geometry_type="Point",
        )
        assert envelope.to_dict() == {
            "idField": ":id",
            "name": "Trees",
            "description": "d",
            "copyrightText": "This data licensed by the City under CC0",
            "extent": [[0, 0], [1, 1]],
            "geometryType": "Point",
        }

    def test_null_extent_kept_unknown_geometry_dropped(self):
        data = MetadataEnvelope.build(
            DescriptiveMetadata(name="Trees"),
            organization="the City",
            extent=None,
        ).to_dict()
        assert "extent" in data and data["extent"] is None
        assert "geometryType" not in data

    def test_missing_license_omits_copyright(self):
        data = MetadataEnvelope.build(
            DescriptiveMetadata(name="Trees", description="d"),
            organization="the City",
            extent=None,
        ).to_dict()
        assert "copyrightText" not in data
