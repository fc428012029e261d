"""Pytest fixtures: an in-memory stand-in for the HTTP layer and a client wired to it."""

import json
from types import SimpleNamespace
from urllib.parse import urlsplit

import pytest

from igc_client.client import IGCRestClient

BASE_URL = "https://igc.example.com:9443"


class FakeResponse:
    def __init__(self, status_code=200, body=None, cookies=None, headers=None):
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)
        self.status_code = status_code
        self.text = body or ""
        self.content = self.text.encode("utf-8")
        self.cookies = dict(cookies or {})
        self.headers = dict(headers or {})


class FakeHttp:
    """
    Mimics ``requests.request``. Responses are queued per (method, target);
    the last queued response for a target keeps being returned.
    """

    def __init__(self):
        self.calls = []
        self._routes = {}

    def add(self, method, target, body=None, status=200, cookies=None, headers=None, error=None):
        outcome = error if error is not None else FakeResponse(status, body, cookies, headers)
        self._routes.setdefault((method, target), []).append(outcome)
        return self

    def reset(self):
        """Drop all queued responses (recorded calls are kept)."""
        self._routes.clear()

    def request(self, method, url, headers=None, timeout=None, **kwargs):
        parts = urlsplit(url)
        target = parts.path + (f"?{parts.query}" if parts.query else "")
        self.calls.append({
            "method": method,
            "url": url,
            "target": target,
            "headers": dict(headers or {}),
            "timeout": timeout,
            **kwargs,
        })
        queue = self._routes.get((method, target)) or self._routes.get((method, parts.path))
        if not queue:
            raise AssertionError(f"Unexpected request: {method} {target}")
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def calls_to(self, path):
        return [c for c in self.calls if urlsplit(c["url"]).path == path]

    def json_bodies(self, path):
        return [json.loads(c["data"]) for c in self.calls_to(path)]


def type_property(name, kind="string", url=None, max_cardinality=1):
    type_ref = {"_id": kind, "_name": kind}
    if url is not None:
        type_ref["_url"] = url
    return {"name": name, "displayName": name.replace("_", " ").title(), "type": type_ref, "maxCardinality": max_cardinality}


def type_details(type_id, display_name, view, create=None):
    return {
        "_id": type_id,
        "_name": display_name,
        "viewInfo": {"properties": view},
        "createInfo": {"properties": create or []},
        "editInfo": {"properties": []},
    }


def item_list(items, num_total=None, next_url=None):
    paging = {"numTotal": len(items) if num_total is None else num_total, "pageSize": 10}
    if next_url is not None:
        paging["next"] = next_url
    return {"items": items, "paging": paging}


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def client(http):
    return IGCRestClient(BASE_URL, "isadmin", "secret", http=http)


@pytest.fixture
def policy_details():
    """The 'policy' type: a string, an unbounded relationship and modification tracking."""
    return type_details(
        "policy",
        "Policy",
        view=[
            type_property("_id"),
            type_property("name"),
            type_property("owner", kind="user", url="https://igc.example.com:9443/ibm/iis/igc-rest/v1/types/user", max_cardinality=-1),
            type_property("created_on"),
            type_property("created_by"),
            type_property("modified_on"),
            type_property("modified_by"),
        ],
        create=[type_property("name")],
    )


@pytest.fixture
def payloads():
    """Builders for IGC JSON payloads."""
    return SimpleNamespace(type_property=type_property, type_details=type_details, item_list=item_list)
