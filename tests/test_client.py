import json

import pytest
import requests

from reqtools import JSONResponse, post_json
from reqtools import client as client_module


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code


class FakeSession:
    def __init__(self, status_code=200):
        self.status_code = status_code
        self.calls = []
        self.closed = False

    def post(self, uri, data=None, headers=None, timeout=None):
        self.calls.append({"uri": uri, "data": data, "headers": headers, "timeout": timeout})
        return FakeResponse(self.status_code)

    def close(self):
        self.closed = True


def test_post_json_with_session():
    session = FakeSession(status_code=202)
    response, status = post_json("http://example.com/some/path", {"bar": "bar"}, session=session)

    assert status == 202
    assert response.status_code == 202
    call = session.calls[0]
    assert call["uri"] == "http://example.com/some/path"
    assert call["headers"] == {"Content-Type": "application/json"}
    assert json.loads(call["data"]) == {"bar": "bar"}
    assert not session.closed


def test_post_json_serializes_models():
    session = FakeSession()
    post_json("http://example.com", JSONResponse(message="hi"), session=session)
    assert json.loads(session.calls[0]["data"]) == {"error": False, "message": "hi"}


def test_post_json_default_session_is_closed(monkeypatch):
    created = []

    def factory():
        session = FakeSession()
        created.append(session)
        return session

    monkeypatch.setattr(client_module.requests, "Session", factory)
    _, status = post_json("http://example.com", [1, 2, 3], timeout=5)

    assert status == 200
    assert created[0].closed
    assert created[0].calls[0]["timeout"] == 5


def test_post_json_unserializable_payload():
    session = FakeSession()
    with pytest.raises(TypeError):
        post_json("http://example.com", {"x": object()}, session=session)
    assert session.calls == []


@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_post_json_rejects_non_finite_numbers(value):
    session = FakeSession()
    with pytest.raises(ValueError):
        post_json("http://example.com", {"x": value}, session=session)
    assert session.calls == []


def test_post_json_transport_error_propagates():
    class Broken(FakeSession):
        def post(self, *args, **kwargs):
            raise requests.ConnectionError("refused")

    with pytest.raises(requests.ConnectionError):
        post_json("http://example.com", {}, session=Broken())
