# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for WebFilterChainMiddleware — ordering, short-circuit, excluded paths, body replay."""

from __future__ import annotations

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from csrfmask.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from csrfmask.web.filters import PathExcludingFilter, WebFilter

# ---------------------------------------------------------------------------
# Test filters
# ---------------------------------------------------------------------------


class HeaderFilter(PathExcludingFilter):
    """Adds X-Filter-A header to every response."""

    async def do_filter(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Filter-A"] = "applied"
        return response


class TraceFilter(PathExcludingFilter):
    """Records its position relative to HeaderFilter."""

    async def do_filter(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Seen-A"] = "yes" if "X-Filter-A" in response.headers else "no"
        return response


class ShortCircuitFilter(PathExcludingFilter):
    """Returns 429 without calling next — simulates rate limiting."""

    async def do_filter(self, request, call_next):
        return JSONResponse({"error": "rate limited"}, status_code=429)


class BodyPeekFilter(PathExcludingFilter):
    """Reads the whole request body before the handler runs."""

    async def do_filter(self, request, call_next):
        body = await request.body()
        response = await call_next(request)
        response.headers["X-Peeked"] = str(len(body))
        return response


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _ok_handler(request: Request) -> PlainTextResponse:
    return PlainTextResponse("OK")


async def _echo_handler(request: Request) -> PlainTextResponse:
    return PlainTextResponse(await request.body())


def _make_app(*filters) -> Starlette:
    return Starlette(
        routes=[
            Route("/test", _ok_handler),
            Route("/api/data", _ok_handler),
            Route("/health", _ok_handler),
            Route("/echo", _echo_handler, methods=["POST"]),
        ],
        middleware=[Middleware(WebFilterChainMiddleware, filters=list(filters))],
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestFilterChainOrdering:
    def test_filters_applied(self):
        client = TestClient(_make_app(HeaderFilter(), TraceFilter()))
        resp = client.get("/test")
        assert resp.status_code == 200
        assert resp.headers["X-Filter-A"] == "applied"

    def test_first_filter_is_outermost(self):
        client = TestClient(_make_app(TraceFilter(), HeaderFilter()))
        assert client.get("/test").headers["X-Seen-A"] == "yes"

    def test_filters_conform_to_protocol(self):
        assert isinstance(HeaderFilter(), WebFilter)


class TestFilterChainExcludedPaths:
    def test_excluded_path_skips_filter(self):
        client = TestClient(_make_app(HeaderFilter(["/health"])))
        assert "X-Filter-A" not in client.get("/health").headers
        assert client.get("/test").headers["X-Filter-A"] == "applied"

    def test_glob_exclusion(self):
        client = TestClient(_make_app(HeaderFilter(["/api/*"])))
        assert "X-Filter-A" not in client.get("/api/data").headers
        assert client.get("/test").headers["X-Filter-A"] == "applied"

    def test_exclusion_is_case_sensitive(self):
        client = TestClient(_make_app(HeaderFilter(["/HEALTH"])))
        assert client.get("/health").headers["X-Filter-A"] == "applied"


class TestFilterChainShortCircuit:
    def test_short_circuit_returns_early(self):
        client = TestClient(_make_app(ShortCircuitFilter()))
        resp = client.get("/test")
        assert resp.status_code == 429
        assert resp.json() == {"error": "rate limited"}


class TestFilterChainBodyReplay:
    def test_handler_reads_body_consumed_by_filter(self):
        client = TestClient(_make_app(BodyPeekFilter()))
        resp = client.post("/echo", content=b"payload")
        assert resp.text == "payload"
        assert resp.headers["X-Peeked"] == "7"

    def test_body_untouched_without_filter_read(self):
        client = TestClient(_make_app(HeaderFilter()))
        assert client.post("/echo", content=b"payload").text == "payload"


class TestFilterChainEmpty:
    def test_no_filters_passes_through(self):
        client = TestClient(_make_app())
        resp = client.get("/test")
        assert resp.status_code == 200
        assert resp.text == "OK"
