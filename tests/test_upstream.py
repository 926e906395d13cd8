"""Tests for the shared upstream client and listing helpers."""

import asyncio

import httpx
import pytest

from services.listing import contains, count_by, equals, paginate, sort_by, unique_options
from services.upstream import UpstreamClient, UpstreamError, gather, safe_list


def _client(handler):
    return UpstreamClient("http://svc.test/api/", timeout=5, transport=httpx.MockTransport(handler))


class TestMakeRequest:
    def test_joins_base_url_and_parses_json(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            return httpx.Response(200, json=[{"id": 1}])

        assert _client(handler).get("/items") == [{"id": 1}]
        assert seen["url"] == "http://svc.test/api/items"

    def test_empty_body_returns_none(self):
        assert _client(lambda r: httpx.Response(204)).delete("/items/1") is None

    def test_plain_text_body_is_returned_as_text(self):
        assert _client(lambda r: httpx.Response(200, text="deleted")).delete("/x") == "deleted"

    def test_http_error_uses_service_message(self):
        client = _client(lambda r: httpx.Response(409, json={"message": "Duplicate code"}))
        with pytest.raises(UpstreamError) as exc:
            client.post("/items", json={})
        assert exc.value.status_code == 409
        assert exc.value.message == "Duplicate code"

    def test_http_error_without_body_reports_status(self):
        with pytest.raises(UpstreamError) as exc:
            _client(lambda r: httpx.Response(500)).get("/items")
        assert exc.value.message == "HTTP 500"

    def test_timeout_maps_to_504(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(UpstreamError) as exc:
            _client(handler).get("/items")
        assert exc.value.status_code == 504

    def test_connection_failure_maps_to_503(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamError) as exc:
            _client(handler).get("/items")
        assert exc.value.status_code == 503


class TestUnwrap:
    def test_envelope_returns_data(self):
        client = UpstreamClient("http://svc.test")
        assert client.unwrap({"success": True, "message": "ok", "data": {"a": 1}}) == {"a": 1}

    def test_unsuccessful_envelope_raises(self):
        client = UpstreamClient("http://svc.test")
        with pytest.raises(UpstreamError) as exc:
            client.unwrap({"success": False, "message": "Institution code already exists"})
        assert exc.value.message == "Institution code already exists"

    def test_bare_payload_passes_through(self):
        assert UpstreamClient("http://svc.test").unwrap([1, 2]) == [1, 2]

    def test_unwrap_list_handles_null_and_pages(self):
        client = UpstreamClient("http://svc.test")
        assert client.unwrap_list({"success": True, "data": None}) == []
        assert client.unwrap_list({"data": {"content": [{"id": 1}]}}) == [{"id": 1}]


class TestConcurrency:
    def test_gather_keeps_call_order(self):
        results = asyncio.run(gather(lambda: "students", lambda: "classrooms", lambda: "institutions"))
        assert results == ["students", "classrooms", "institutions"]

    def test_safe_list_degrades_to_empty(self):
        def failing():
            raise UpstreamError("attendance", 503, "down")

        assert safe_list("students", failing) == []


class TestListing:
    def test_paginate_slices_and_counts_pages(self):
        items, meta = paginate(list(range(17)), page=3, size=8)
        assert items == [16]
        assert (meta.total, meta.pages, meta.page) == (17, 3, 3)

    def test_paginate_past_end_is_empty(self):
        items, meta = paginate([1, 2], page=5, size=8)
        assert items == []
        assert meta.pages == 1

    def test_sort_by_puts_missing_last(self):
        rows = [{"d": "2025-01-02"}, {"d": None}, {"d": "2025-03-01"}]
        assert [r["d"] for r in sort_by(rows, "d", descending=True)] == ["2025-03-01", "2025-01-02", None]

    def test_contains_and_equals(self):
        assert contains("María López", "lóp")
        assert contains(None, "")
        assert not contains(None, "x")
        assert equals("ACTIVE", "all")
        assert equals("active", "ACTIVE")
        assert not equals(None, "ACTIVE")

    def test_count_and_unique_options(self):
        rows = [{"t": "A", "id": "1", "n": "One"}, {"t": "A", "id": "1", "n": "One"}, {"t": "B", "id": "2", "n": None}]
        assert count_by(rows, "t") == {"A": 2, "B": 1}
        assert unique_options(rows, "id", "n") == [{"id": "1", "name": "One"}, {"id": "2", "name": "2"}]
