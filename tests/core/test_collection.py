"""Tests for ContextCollection membership, lifecycle and routing."""
from __future__ import annotations

from pathlib import Path

import pytest
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from webfixture.core.collection import ContextCollection
from webfixture.core.context import ContextState, WebAppContext
from webfixture.core.errors import ContextStartupError


def _context(tmp_path: Path, context_path: str, body: str | None = None) -> WebAppContext:
    ctx = WebAppContext(tmp_path / context_path.strip("/").replace("/", "_"), context_path)
    text = body or context_path

    def handler(request):
        return PlainTextResponse(f"{text}:{request.path_params['rest']}")

    ctx.add_route(Route("/{rest:path}", handler))
    return ctx


class TestMembership:
    def test_starts_empty(self):
        assert len(ContextCollection()) == 0

    def test_append_order(self, tmp_path: Path):
        coll = ContextCollection()
        a, b = _context(tmp_path, "/a"), _context(tmp_path, "/b")

        coll.add_handler(a)
        coll.add_handler(b)

        assert coll.contexts == [a, b]
        assert list(coll) == [a, b]

    def test_duplicate_add_registers_twice(self, tmp_path: Path):
        coll = ContextCollection()
        a = _context(tmp_path, "/a")

        coll.add_handler(a)
        coll.add_handler(a)

        assert len(coll) == 2

    def test_match_path_longest_prefix(self, tmp_path: Path):
        coll = ContextCollection()
        outer, inner = _context(tmp_path, "/app"), _context(tmp_path, "/app/admin")
        coll.add_handler(outer)
        coll.add_handler(inner)

        assert coll.match_path("/app/x") is outer
        assert coll.match_path("/app/admin/x") is inner
        assert coll.match_path("/app") is outer
        assert coll.match_path("/application") is None
        assert coll.match_path("") is None

    def test_match_path_agrees_with_routing(self, tmp_path: Path):
        coll = ContextCollection()
        for path in ("/app", "/app/admin", "/app"):
            ctx = _context(tmp_path, path, body=f"{path}#{len(coll)}")
            coll.add_handler(ctx)
            coll.manage(ctx)

        with TestClient(coll) as client:
            for url in ("/app/x", "/app/admin/y"):
                matched = coll.match_path(url)
                index = coll.contexts.index(matched)
                served = client.get(url).text.split(":")[0]
                assert served == f"{matched.context_path}#{index}"


class TestLifecycle:
    def test_start_starts_managed_only(self, tmp_path: Path):
        coll = ContextCollection()
        managed, unmanaged = _context(tmp_path, "/m"), _context(tmp_path, "/u")
        coll.add_handler(managed)
        coll.add_handler(unmanaged)
        coll.manage(managed)

        coll.start()

        assert managed.is_started
        assert unmanaged.state is ContextState.STOPPED
        assert coll.is_managed(managed) and not coll.is_managed(unmanaged)

    def test_stop_stops_managed(self, tmp_path: Path):
        coll = ContextCollection()
        a = _context(tmp_path, "/a")
        coll.add_handler(a)
        coll.manage(a)
        coll.start()

        coll.stop()

        assert a.state is ContextState.STOPPED
        assert not coll.is_started

    def test_manage_after_start_starts_immediately(self, tmp_path: Path):
        coll = ContextCollection()
        coll.start()
        late = _context(tmp_path, "/late")

        coll.add_handler(late)
        coll.manage(late)

        assert late.is_started

    def test_failing_context_fails_start(self, tmp_path: Path):
        coll = ContextCollection()
        bad = _context(tmp_path, "/bad")
        bad.web_inf.mkdir(parents=True)
        bad.descriptor_path.write_text("<web-app>")
        bad.throw_unavailable_on_startup_exception = True
        coll.add_handler(bad)
        coll.manage(bad)

        with pytest.raises(ContextStartupError):
            coll.start()

        assert not coll.is_started
        assert isinstance(coll.startup_error, ContextStartupError)

    def test_failed_start_stops_contexts_already_started(self, tmp_path: Path):
        coll = ContextCollection()
        first, second = _context(tmp_path, "/first"), _context(tmp_path, "/second")
        bad = _context(tmp_path, "/bad")
        bad.web_inf.mkdir(parents=True)
        bad.descriptor_path.write_text("<web-app>")
        bad.throw_unavailable_on_startup_exception = True
        for ctx in (first, second, bad):
            coll.add_handler(ctx)
            coll.manage(ctx)

        with pytest.raises(ContextStartupError):
            coll.start()
        coll.stop()

        assert first.state is ContextState.STOPPED
        assert second.state is ContextState.STOPPED
        assert bad.state is ContextState.FAILED
        assert not coll.is_started

    def test_start_after_failed_start_retries(self, tmp_path: Path):
        coll = ContextCollection()
        good = _context(tmp_path, "/good")
        bad = _context(tmp_path, "/bad")
        bad.web_inf.mkdir(parents=True)
        bad.descriptor_path.write_text("<web-app>")
        bad.throw_unavailable_on_startup_exception = True
        for ctx in (good, bad):
            coll.add_handler(ctx)
            coll.manage(ctx)
        with pytest.raises(ContextStartupError):
            coll.start()

        bad.descriptor_path.write_text("<web-app/>")
        coll.start()

        assert good.is_started and bad.is_started
        assert coll.startup_error is None


class TestRouting:
    def test_routes_by_prefix_through_lifespan(self, tmp_path: Path):
        coll = ContextCollection()
        for path in ("/app", "/app/admin", "/other"):
            ctx = _context(tmp_path, path)
            coll.add_handler(ctx)
            coll.manage(ctx)

        with TestClient(coll) as client:
            assert client.get("/app/x").text == "/app:x"
            assert client.get("/app/admin/y").text == "/app/admin:y"
            assert client.get("/other/z").text == "/other:z"

        assert not coll.is_started

    def test_unknown_prefix_is_404(self, tmp_path: Path):
        coll = ContextCollection()

        with TestClient(coll) as client:
            assert client.get("/missing/x").status_code == 404

    def test_lifespan_propagates_startup_failure(self, tmp_path: Path):
        coll = ContextCollection()
        bad = _context(tmp_path, "/bad")
        bad.web_inf.mkdir(parents=True)
        bad.descriptor_path.write_text("not xml")
        bad.throw_unavailable_on_startup_exception = True
        coll.add_handler(bad)
        coll.manage(bad)

        with pytest.raises(ContextStartupError):
            with TestClient(coll):
                pass
