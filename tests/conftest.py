# tests/conftest.py
import json

import pytest
import requests

from conversation_digest.api.session import ApiSession

API_URL = "http://api.test"


def make_response(url, payload=None, status=200, raw=None):
    """Build a real requests.Response without touching the network."""
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp.reason = "OK" if status < 400 else "Not Found"
    body = raw if raw is not None else json.dumps(payload)
    resp._content = body.encode("utf-8")
    resp.encoding = "utf-8"
    resp.headers["Content-Type"] = "application/json"
    return resp


class FakeApi:
    """Stand-in for requests.Session that serves canned responses by path.

    Unknown paths answer 404, like the real service does.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []
        self.closed = False

    def add(self, path, payload=None, status=200, raw=None, exc=None):
        self.routes[path] = (payload, status, raw, exc)

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        path = url[len(API_URL):]
        if path not in self.routes:
            return make_response(url, {"error": "not found"}, status=404)
        payload, status, raw, exc = self.routes[path]
        if exc is not None:
            raise exc
        return make_response(url, payload, status=status, raw=raw)

    def requested_paths(self):
        return [call["url"][len(API_URL):] for call in self.calls]

    def close(self):
        self.closed = True


USERS = [
    {"id": "1", "username": "John", "avatar_url": "http://placekitten.com/g/300/300"},
    {"id": "2", "username": "Amy", "avatar_url": "http://placekitten.com/g/301/301"},
    {"id": "3", "username": "Jeremy", "avatar_url": "http://placekitten.com/g/302/302"},
    {"id": "4", "username": "Hannah", "avatar_url": "http://placekitten.com/g/303/303"},
    {"id": "5", "username": "Charlie", "avatar_url": "http://placekitten.com/g/304/304"},
    {"id": "6", "username": "George", "avatar_url": "http://placekitten.com/g/305/305"},
]


def _message(mid, conversation_id, body, from_user_id, created_at):
    return {
        "id": mid,
        "conversation_id": conversation_id,
        "body": body,
        "from_user_id": from_user_id,
        "created_at": created_at,
    }


# Conversations deliberately listed out of recency order
CONVERSATIONS = [{"id": cid, "with_user_id": "2"} for cid in ("3", "1", "5", "2", "4")]

MESSAGES = {
    "1": [
        _message("10", "1", "Hei", "2", "2016-08-20T10:15:00.670Z"),
        _message("1", "1", "Moi!", "1", "2016-08-25T10:15:00.670Z"),
        _message("11", "1", "Mitä kuuluu?", "2", "2016-08-22T10:15:00.670Z"),
    ],
    "2": [
        _message("2", "2", "Hello!", "3", "2016-08-24T10:15:00.670Z"),
        _message("12", "2", "Hi", "1", "2016-08-23T09:00:00.000Z"),
    ],
    "3": [
        _message("3", "3", "Hi!", "1", "2016-08-23T10:15:00.670Z"),
    ],
    "4": [
        _message("13", "4", "Night!", "1", "2016-08-21T22:00:00.000Z"),
        _message("4", "4", "Morning!", "5", "2016-08-22T10:15:00.670Z"),
    ],
    "5": [
        _message("5", "5", "Pleep!", "6", "2016-08-21T10:15:00.670Z"),
    ],
}

EXPECTED_SUMMARIES = [
    {
        "id": "1",
        "latest_message": {
            "id": "1",
            "body": "Moi!",
            "from_user": {"id": "1", "avatar_url": "http://placekitten.com/g/300/300"},
            "created_at": "2016-08-25T10:15:00.670Z",
        },
    },
    {
        "id": "2",
        "latest_message": {
            "id": "2",
            "body": "Hello!",
            "from_user": {"id": "3", "avatar_url": "http://placekitten.com/g/302/302"},
            "created_at": "2016-08-24T10:15:00.670Z",
        },
    },
    {
        "id": "3",
        "latest_message": {
            "id": "3",
            "body": "Hi!",
            "from_user": {"id": "1", "avatar_url": "http://placekitten.com/g/300/300"},
            "created_at": "2016-08-23T10:15:00.670Z",
        },
    },
    {
        "id": "4",
        "latest_message": {
            "id": "4",
            "body": "Morning!",
            "from_user": {"id": "5", "avatar_url": "http://placekitten.com/g/304/304"},
            "created_at": "2016-08-22T10:15:00.670Z",
        },
    },
    {
        "id": "5",
        "latest_message": {
            "id": "5",
            "body": "Pleep!",
            "from_user": {"id": "6", "avatar_url": "http://placekitten.com/g/305/305"},
            "created_at": "2016-08-21T10:15:00.670Z",
        },
    },
]


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def populated_api(fake_api):
    fake_api.add("/conversations", CONVERSATIONS)
    fake_api.add("/users", USERS)
    for cid, messages in MESSAGES.items():
        fake_api.add(f"/conversations/{cid}/messages", messages)
    return fake_api


@pytest.fixture
def session(fake_api):
    return ApiSession(API_URL, token="test-token", timeout=5, max_workers=3, http=fake_api)


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the real config file, env and Keychain."""
    from conversation_digest.api import config

    monkeypatch.setattr(config, "DEFAULT_CONFIG_PATH", tmp_path / "config.json")
    monkeypatch.delenv(config.API_URL_ENV, raising=False)
    monkeypatch.delenv(config.TOKEN_ENV, raising=False)
