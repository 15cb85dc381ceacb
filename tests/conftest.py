"""In-memory Swift/CloudFiles service behind ``httpx.MockTransport``."""

from email.utils import formatdate
from swiftfiles.auth import AuthenticateRequest
from swiftfiles.client import CloudFilesClient
from swiftfiles.swift import SwiftObjectClient
from urllib.parse import unquote

import datetime
import hashlib
import httpx
import itertools
import json
import pytest


AUTH_URL = "https://auth.example.com/v1.0"
KEYSTONE_URL = "https://identity.example.com/v2.0"
STORAGE_URL = "https://storage.example.com/v1/AUTH_test"
STORAGE_PATH = "/v1/AUTH_test"
USERNAME = "tester"
API_KEY = "secret"


class FakeSwift:
    def __init__(self):
        self.containers = {}  # {name: {key: stored_object_dict}}
        self.valid_tokens = set()
        self.requests = []
        self.auth_requests = []
        self._tokens = itertools.count(1)
        self._failures = []

    # -- Test hooks --

    def fail_next(self, status):
        """Answer the next storage request with ``status``."""
        self._failures.append(status)

    def expire_tokens(self):
        self.valid_tokens.clear()

    def storage_requests(self):
        return [r for r in self.requests if r.url.host == "storage.example.com"]

    def add_object(self, container, key, data, content_type="text/plain", **meta):
        self.containers.setdefault(container, {})[key] = {
            "data": data,
            "content_type": content_type,
            "etag": hashlib.md5(data).hexdigest(),
            "meta": dict(meta),
            "last_modified": datetime.datetime(2024, 1, 2, 3, 4, 5),
        }

    # -- Dispatch --

    def handle(self, request):
        self.requests.append(request)
        if request.url.host == "auth.example.com":
            return self._auth_v1(request)
        if request.url.host == "identity.example.com":
            return self._auth_v2(request)
        if request.headers.get("X-Auth-Token") not in self.valid_tokens:
            return httpx.Response(401)
        if self._failures:
            return httpx.Response(self._failures.pop(0))
        raw_path = request.url.raw_path.split(b"?")[0].decode("ascii")
        assert raw_path.startswith(STORAGE_PATH)
        path = unquote(raw_path[len(STORAGE_PATH) :].lstrip("/"))
        container, _, key = path.partition("/")
        if not container:
            return self._account(request)
        if not key:
            return self._container(request, container)
        return self._object(request, container, key)

    def _new_token(self):
        token = f"tk-{next(self._tokens)}"
        self.valid_tokens.add(token)
        return token

    def _auth_v1(self, request):
        self.auth_requests.append(request)
        if (
            request.headers.get("X-Auth-User") != USERNAME
            or request.headers.get("X-Auth-Key") != API_KEY
        ):
            return httpx.Response(401)
        return httpx.Response(
            204,
            headers={"X-Storage-Url": STORAGE_URL, "X-Auth-Token": self._new_token()},
        )

    def _auth_v2(self, request):
        self.auth_requests.append(request)
        creds = json.loads(request.content)["auth"]["passwordCredentials"]
        if creds != {"username": USERNAME, "password": API_KEY}:
            return httpx.Response(401)
        catalog = [
            {"type": "compute", "endpoints": [{"publicURL": "https://nova"}]},
            {
                "type": "object-store",
                "endpoints": [
                    {"region": "DFW", "publicURL": "https://dfw.example.com/v1/x"},
                    {"region": "ORD", "publicURL": STORAGE_URL},
                ],
            },
        ]
        body = {"access": {"token": {"id": self._new_token()}, "serviceCatalog": catalog}}
        return httpx.Response(200, json=body)

    def _listing(self, request, names):
        params = request.url.params
        if "prefix" in params:
            names = [n for n in names if n.startswith(params["prefix"])]
        if "marker" in params:
            names = [n for n in names if n > params["marker"]]
        if "end_marker" in params:
            names = [n for n in names if n < params["end_marker"]]
        if "limit" in params:
            names = names[: int(params["limit"])]
        return names

    def _account(self, request):
        if request.method == "HEAD":
            used = sum(
                len(o["data"]) for objs in self.containers.values() for o in objs.values()
            )
            return httpx.Response(
                204,
                headers={
                    "X-Account-Container-Count": str(len(self.containers)),
                    "X-Account-Bytes-Used": str(used),
                },
            )
        names = self._listing(request, sorted(self.containers))
        if not names:
            return httpx.Response(204)
        entries = [
            {
                "name": name,
                "count": len(self.containers[name]),
                "bytes": sum(len(o["data"]) for o in self.containers[name].values()),
            }
            for name in names
        ]
        return httpx.Response(200, json=entries)

    def _container(self, request, container):
        exists = container in self.containers
        if request.method == "PUT":
            self.containers.setdefault(container, {})
            return httpx.Response(202 if exists else 201)
        if not exists:
            return httpx.Response(404)
        if request.method == "DELETE":
            if self.containers[container]:
                return httpx.Response(409)
            del self.containers[container]
            return httpx.Response(204)
        objects = self.containers[container]
        names = self._listing(request, sorted(objects))
        if not names:
            return httpx.Response(204)
        entries = [
            {
                "name": name,
                "bytes": len(objects[name]["data"]),
                "hash": objects[name]["etag"],
                "content_type": objects[name]["content_type"],
                "last_modified": objects[name]["last_modified"].isoformat(),
            }
            for name in names
        ]
        return httpx.Response(200, json=entries)

    def _object(self, request, container, key):
        if container not in self.containers:
            return httpx.Response(404)
        objects = self.containers[container]
        if request.method == "PUT":
            data = request.content
            etag = hashlib.md5(data).hexdigest()
            if request.headers.get("ETag", etag) != etag:
                return httpx.Response(422)
            objects[key] = {
                "data": data,
                "content_type": request.headers.get("Content-Type"),
                "etag": etag,
                "meta": self._meta_headers(request),
                "last_modified": datetime.datetime(2024, 1, 2, 3, 4, 5),
            }
            return httpx.Response(201, headers={"ETag": etag})
        if key not in objects:
            return httpx.Response(404)
        stored = objects[key]
        if request.method == "POST":
            stored["meta"] = self._meta_headers(request)
            return httpx.Response(202)
        if request.method == "DELETE":
            del objects[key]
            return httpx.Response(204)
        headers = {
            "Content-Type": stored["content_type"],
            "Content-Length": str(len(stored["data"])),
            "ETag": stored["etag"],
            "Last-Modified": formatdate(
                stored["last_modified"].replace(tzinfo=datetime.timezone.utc).timestamp(),
                usegmt=True,
            ),
        }
        for name, value in stored["meta"].items():
            headers["X-Object-Meta-" + name] = value
        if request.method == "HEAD":
            return httpx.Response(200, headers=headers)
        return httpx.Response(200, headers=headers, content=stored["data"])

    @staticmethod
    def _meta_headers(request):
        prefix = "x-object-meta-"
        return {
            name[len(prefix) :]: value
            for name, value in request.headers.items()
            if name.lower().startswith(prefix)
        }


@pytest.fixture
def swift():
    return FakeSwift()


@pytest.fixture
def transport(swift):
    return httpx.MockTransport(swift.handle)


@pytest.fixture
def auth():
    return AuthenticateRequest(auth_url=AUTH_URL, username=USERNAME, api_key=API_KEY)


@pytest.fixture
def client(auth, transport):
    with CloudFilesClient(auth, transport=transport) as c:
        yield c


@pytest.fixture
def swift_client(auth, transport):
    with SwiftObjectClient(auth, transport=transport) as c:
        yield c
