"""
Shared fixtures.

The translation store is a small Flask application mounted into the real
APIClient through httpx.WSGITransport, so requests go through the full client
code path without a network.
"""

import json
from pathlib import Path

import httpx
import pytest
from flask import Flask, jsonify, request

from yflow.api.client import APIClient

STORE_URL = "http://store.test/api"
API_KEY = "test-key"
PROJECT_ID = 7


class FakeStore:
    """In-memory store state, shaped the way the store keeps it: {key: {lang: value}}."""

    def __init__(self):
        self.api_key = API_KEY
        self.translations = {}
        self.push_requests = []
        self.fetch_requests = []
        self.rate_limited = 0  # number of upcoming pushes answered with 429
        self.push_status = None  # force an error status for every push
        self.fail_keys = set()

    def pushed_sizes(self):
        return [
            sum(len(keys) for keys in body.get("translations", {}).values())
            for body in self.push_requests
        ]


def create_store_app(store: FakeStore) -> Flask:
    app = Flask(__name__)
    app.json.sort_keys = False

    @app.before_request
    def check_api_key():
        if request.headers.get("X-API-Key") != store.api_key:
            return jsonify({"error": "invalid api key"}), 401

    @app.get("/api/cli/auth")
    def auth():
        return jsonify({"data": {"project_id": PROJECT_ID}})

    @app.get("/api/cli/translations")
    def translations():
        store.fetch_requests.append(request.args.to_dict())
        return jsonify({"data": store.translations})

    @app.post("/api/cli/keys")
    def push_keys():
        body = request.get_json()
        store.push_requests.append(body)

        if store.rate_limited > 0:
            store.rate_limited -= 1
            return jsonify({"error": "too many requests"}), 429, {"Retry-After": "1"}
        if store.push_status is not None:
            return "internal error", store.push_status

        added, existed, failed = [], [], []
        for lang, keys in (body.get("translations") or {}).items():
            for key, value in keys.items():
                if key in store.fail_keys:
                    failed.append(key)
                    continue
                entry = store.translations.setdefault(key, {})
                (existed if lang in entry else added).append(key)
                entry[lang] = value

        return jsonify({"data": {"added": added, "existed": existed, "failed": failed}})

    return app


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def store_app(fake_store):
    return create_store_app(fake_store)


@pytest.fixture
def client(store_app):
    api_client = APIClient(STORE_URL, API_KEY, PROJECT_ID, transport=httpx.WSGITransport(app=store_app))
    yield api_client
    api_client.close()


@pytest.fixture
def messages_dir(tmp_path):
    root = tmp_path / "messages"
    write_json(root / "en" / "common.json", {"app": {"title": "My App", "save": "Save"}})
    write_json(root / "en" / "pages" / "home.json", {"home": {"welcome": "Welcome"}})
    write_json(root / "zh_CN" / "common.json", {"app": {"title": "我的应用"}})
    return root


@pytest.fixture
def sleeps():
    """Recorded sleep calls; pass `sleeps.append` as a pipeline's sleep function."""
    return []
