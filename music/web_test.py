import logging

import flask
import pytest

from . import config, errors
from .app import create_app
from .web import controller, make_status

E = errors.pkg("web_test").struct("api")


def serve(fn, rule="/thing", methods=("GET",)):
    app = flask.Flask(__name__)
    app.add_url_rule(rule, "thing", controller(fn), methods=list(methods))
    return app.test_client()


def test_string_payload_becomes_status():
    client = serve(lambda c: (201, "abc123", None))
    resp = client.get("/thing")
    assert resp.status_code == 201
    assert resp.get_json() == {"data": {"id": "abc123", "type": "status", "attributes": {"status": "ok"}}}
    assert resp.get_json() == make_status("abc123")


def test_other_payloads_are_json():
    client = serve(lambda c: (200, [{"name": "Imagine"}, {"name": "ダンス"}], None))
    resp = client.get("/thing")
    assert resp.headers["Content-Type"] == "application/json; charset=utf-8"
    assert resp.get_data(as_text=True) == '[{"name":"Imagine"},{"name":"ダンス"}]'


def test_none_payload():
    resp = serve(lambda c: (201, None, None)).get("/thing")
    assert resp.status_code == 201
    assert resp.get_json() is None


def test_redirect():
    resp = serve(lambda c: (302, "https://example.com/songs", None)).get("/thing")
    assert resp.status_code == 302
    assert resp.headers["Location"] == "https://example.com/songs"


@pytest.mark.parametrize('err,code,body', [
    (E.fn("a").not_found(), 404, {"error": "resource not found"}),
    (E.fn("b").invalid("bad"), 400, {"error": "invalid data sent"}),
    (E.fn("c").uk(E.fn("d").db(RuntimeError("password authentication failed"))), 500, {"error": "unknown error"}),
    (E.fn("e").new("no external"), 500, {"error": "unknown error"}),
    (RuntimeError("password authentication failed"), 500, {"error": "unknown error :("}),
])
def test_errors_only_show_external(err, code, body):
    resp = serve(lambda c: (code, {"leak": True}, err)).get("/thing")
    assert resp.status_code == code
    assert resp.get_json() == body


def test_context():
    seen = {}

    def fn(c):
        seen["name"] = c.param("name")
        seen["id"] = c.id
        seen["body"] = c.request.get_json()
        return 200, None, None

    client = serve(fn, "/thing/<name>", ["POST"])
    client.post("/thing/Imagine", json={"a": 1})
    client.post("/thing/Imagine", json={"a": 1})
    assert seen["name"] == "Imagine"
    assert seen["body"] == {"a": 1}
    assert len(seen["id"]) == 32


def test_ping(client):
    resp = client.get("/ping")
    assert resp.status_code == 200
    assert resp.get_data(as_text=True) == "pong"


@pytest.mark.parametrize('scope', ["local", "test", "production"])
def test_requests_are_logged(conn, caplog, scope):
    caplog.set_level(logging.INFO, logger="music.app")
    client = create_app(config.load({"SCOPE": scope}, paths=[]), conn).test_client()
    client.get("/ping")
    assert "Request: GET /ping" in [r.getMessage() for r in caplog.records]
