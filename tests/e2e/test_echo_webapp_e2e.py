"""
End-to-end: build an exploded web app, deploy it and talk to its endpoints.
"""
from __future__ import annotations

from pathlib import Path

import pytest
from starlette.testclient import TestClient

from webfixture.core.errors import ArtifactNotFound
from webfixture.core.registry import WebAppFixtures


def test_echo_webapp_layout_and_registration(fixtures: WebAppFixtures, test_root: Path):
    app = fixtures.new_fixture("echo-test")
    app.copy_web_inf("empty-web.xml")
    app.copy_class("com.example.EchoEndpoint")
    app.deploy()

    assert (test_root / "echo-test/WEB-INF/web.xml").is_file()
    assert (test_root / "echo-test/WEB-INF/classes/com/example/EchoEndpoint.class").is_file()

    contexts = fixtures.root_handler().contexts
    assert len(contexts) == 1
    assert contexts[0].context_path == "/echo-test"


def test_echo_over_websocket(fixtures: WebAppFixtures):
    app = fixtures.new_fixture("echo-test")
    app.create_web_inf()
    app.copy_class("com.example.EchoEndpoint")
    app.copy_class("com.example.PlainClass")
    app.deploy()

    with TestClient(fixtures.root_handler()) as client:
        with client.websocket_connect("/echo-test/echo") as ws:
            ws.send_text("Hello World")
            assert ws.receive_text() == "Hello World"

        assert [r.path for r in app.context.routes] == ["/echo"]

    assert app.context.routes == []


def test_contexts_are_isolated(fixtures: WebAppFixtures):
    plain = fixtures.new_fixture("plain")
    plain.create_web_inf()
    plain.copy_class("com.example.EchoEndpoint")
    plain.deploy()

    loud = fixtures.new_fixture("loud")
    loud.create_web_inf()
    loud.copy_class("org.acme.OtherEchoEndpoint")
    loud.deploy()

    with TestClient(fixtures.root_handler()) as client:
        with client.websocket_connect("/plain/echo") as ws:
            ws.send_text("hi")
            assert ws.receive_text() == "hi"
        with client.websocket_connect("/loud/echo") as ws:
            ws.send_text("hi")
            assert ws.receive_text() == "HI"


def test_metadata_complete_disables_discovery(fixtures: WebAppFixtures):
    app = fixtures.new_fixture("no-scan")
    app.copy_web_inf("metadata-complete-web.xml")
    app.copy_class("com.example.HelloEndpoint")
    app.deploy()

    with TestClient(fixtures.root_handler()) as client:
        assert client.get("/no-scan/hello").status_code == 404


def test_unresolvable_artifact_leaves_classes_untouched(fixtures: WebAppFixtures, list_tree):
    app = fixtures.new_fixture("echo-test")
    app.copy_class("com.example.EchoEndpoint")
    before = list_tree(app.classes_dir)

    with pytest.raises(ArtifactNotFound):
        app.copy_class("com.example.NoSuchEndpoint")

    assert list_tree(app.classes_dir) == before


def test_http_endpoints_and_routers(fixtures: WebAppFixtures):
    app = fixtures.new_fixture("api-test")
    app.copy_web_inf("params-web.xml")
    app.copy_class("com.example.HelloEndpoint")
    app.copy_class("com.example.GreetingApi")
    app.deploy()

    with TestClient(fixtures.root_handler()) as client:
        assert client.get("/api-test/hello").text == "hello from /api-test"
        r = client.get("/api-test/greetings/world")
        assert r.status_code == 200
        assert r.json() == {"greeting": "hello world"}

    assert app.context.descriptor.display_name == "Echo Test"
