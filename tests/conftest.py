from __future__ import annotations

import io
import json
import threading
import time
from urllib.parse import parse_qs, unquote, urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.models import Response
from requests.structures import CaseInsensitiveDict

from haste.config.transfer_config import TransferConfig
from haste.storage.object_store import ObjectStore
from haste.storage.session import Session

IDENTITY_URL = "https://identity.test/v2.0/tokens"
STORAGE_ROOT = "https://storage.test"
ACCOUNT_PATH = "/v1/MossoCloudFS_acct"
TOKEN = "tok-123"


def endpoint_for(region: str) -> str:
    return f"{STORAGE_ROOT}{ACCOUNT_PATH}-{region.lower()}"


class FakeObjectStoreAdapter(BaseAdapter):
    """In-memory identity service plus object store mounted as a requests transport.

    Records every request, counts listing requests and tracks how many
    requests were in flight at once.
    """

    def __init__(self, *, regions=("DFW", "ORD"), page_size=100, latency=0.0):
        super().__init__()
        self.regions = tuple(regions)
        self.page_size = page_size
        self.latency = latency
        self.credentials = {"username": "alice", "apiKey": "secret"}
        self.containers: dict[str, dict[str, bytes]] = {}
        self.requests: list[tuple[str, str]] = []
        self.listing_markers: list[str | None] = []
        self.listing_status: dict[str | None, int] = {}
        self.fail_transport_for: set[str] = set()
        self.lock = threading.Lock()
        self.in_flight = 0
        self.max_in_flight = 0

    # requests transport API

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        with self.lock:
            self.requests.append((request.method, request.url))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if request.url in self.fail_transport_for:
                raise requests.exceptions.ConnectionError(f"connection refused: {request.url}")
            if self.latency:
                time.sleep(self.latency)
            status, body, headers = self._handle(request)
        finally:
            with self.lock:
                self.in_flight -= 1
        return self._build_response(request, status, body, headers)

    def close(self):
        pass

    # helpers

    def put(self, container: str, key: str, data: bytes = b"") -> None:
        self.containers.setdefault(container, {})[key] = data

    def count(self, method: str, url_prefix: str = "") -> int:
        return sum(1 for m, url in self.requests if m == method and url.startswith(url_prefix))

    @staticmethod
    def _build_response(request, status, body, headers):
        response = Response()
        response.status_code = status
        response.reason = "OK" if status < 400 else "Error"
        response.headers = CaseInsensitiveDict(headers or {})
        response.raw = io.BytesIO(body)
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    @staticmethod
    def _read_body(request) -> bytes:
        body = request.body
        if body is None:
            return b""
        if hasattr(body, "read"):
            return body.read()
        if isinstance(body, str):
            return body.encode("utf-8")
        return bytes(body)

    def _handle(self, request):
        if request.url == IDENTITY_URL:
            return self._identity(request)
        if request.headers.get("X-Auth-Token") != TOKEN:
            return 401, b"Unauthorized", {}

        parts = urlsplit(request.url)
        region = next((r for r in self.regions if parts.path.startswith(f"{ACCOUNT_PATH}-{r.lower()}")), None)
        if region is None:
            return 404, b"", {}
        path = parts.path[len(f"{ACCOUNT_PATH}-{region.lower()}"):].lstrip("/")
        container, _, key = path.partition("/")
        container, key = unquote(container), unquote(key)
        marker = parse_qs(parts.query).get("marker", [None])[0]

        with self.lock:
            if not container:
                return self._listing(request, sorted(self.containers), marker)
            if not key:
                return self._container(request, container, marker)
            return self._object(request, container, key)

    def _identity(self, request):
        document = json.loads(self._read_body(request))
        if document.get("auth", {}).get("RAX-KSKEY:apiKeyCredentials") != self.credentials:
            return 401, b'{"unauthorized": {"code": 401}}', {}
        catalog = [
            {"name": "cloudServersOpenStack", "type": "compute", "endpoints": [
                {"region": r, "publicURL": f"https://compute.test/{r}"} for r in self.regions
            ]},
            {"name": "cloudFiles", "type": "object-store", "endpoints": [
                {"region": r, "tenantId": "acct", "publicURL": endpoint_for(r),
                 "internalURL": endpoint_for(r).replace("storage", "snet-storage")}
                for r in self.regions
            ]},
        ]
        payload = {"access": {"token": {"id": TOKEN, "expires": "2030-01-01T00:00:00Z"}, "serviceCatalog": catalog}}
        return 200, json.dumps(payload).encode(), {"Content-Type": "application/json"}

    def _listing(self, request, names, marker):
        if request.method != "GET":
            return 405, b"", {}
        self.listing_markers.append(marker)
        if marker in self.listing_status:
            return self.listing_status[marker], b"", {}
        if marker is not None:
            names = [name for name in names if name > marker]
        page = names[: self.page_size]
        if not page:
            return 204, b"", {}
        return 200, ("\n".join(page) + "\n").encode(), {"Content-Type": "text/plain"}

    def _container(self, request, container, marker):
        if request.method == "PUT":
            created = container not in self.containers
            self.containers.setdefault(container, {})
            return (201 if created else 202), b"", {}
        if container not in self.containers:
            return 404, b"", {}
        if request.method == "GET":
            return self._listing(request, sorted(self.containers[container]), marker)
        return 405, b"", {}

    def _object(self, request, container, key):
        objects = self.containers.get(container)
        if objects is None:
            return 404, b"", {}
        if request.method == "PUT":
            objects[key] = self._read_body(request)
            return 201, b"", {}
        if request.method == "GET":
            if key not in objects:
                return 404, b"Not Found", {}
            return 200, objects[key], {"Content-Type": "application/octet-stream"}
        if request.method == "DELETE":
            if objects.pop(key, None) is None:
                return 404, b"Not Found", {}
            return 204, b"", {}
        return 405, b"", {}


@pytest.fixture
def fake_store():
    return FakeObjectStoreAdapter()


@pytest.fixture
def http(fake_store):
    session = requests.Session()
    session.mount("https://", fake_store)
    return session


@pytest.fixture
def config():
    return TransferConfig(username="alice", api_key="secret", region="DFW", concurrency=4, identity_url=IDENTITY_URL)


@pytest.fixture
def session():
    return Session(token=TOKEN, endpoint=endpoint_for("DFW"), region="DFW")


@pytest.fixture
def store_for(http, session):
    def _make(container: str) -> ObjectStore:
        return ObjectStore(session.with_container(container), http)

    return _make
