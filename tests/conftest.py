import itertools
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlencode, urlparse

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from demo_lifecycle.api_client import ApiResponse
from demo_lifecycle.config import PipelineSettings, ProvisionSettings, ReclaimSettings, TenantConfig

ENVELOPES = {"organizations": "organization", "users": "user", "tickets": "ticket"}


@dataclass
class Call:
    method: str
    url: str
    body: Optional[Dict[str, Any]]

    @property
    def path(self) -> str:
        return urlparse(self.url).path

    @property
    def query(self) -> Dict[str, List[str]]:
        return parse_qs(urlparse(self.url).query)


@dataclass
class FailureRule:
    method: str
    fragment: str
    status: int
    body: Any
    on_call: Optional[int]
    seen: int = 0
    exception: Optional[Exception] = None


class FakeHelpdesk:
    """In-memory stand-in for the helpdesk REST API, usable as a transport."""

    base_url = "https://acme.zendesk.com"

    def __init__(self, page_size: Optional[int] = None):
        self.records: Dict[str, Dict[int, Dict[str, Any]]] = {name: {} for name in ENVELOPES}
        self.identities: Dict[int, List[str]] = {}
        self.calls: List[Call] = []
        self.rules: List[FailureRule] = []
        self.page_size = page_size
        self._ids = itertools.count(1001)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def fail(self, method, fragment, status=422, body=None, on_call=None, exception=None):
        if body is None:
            body = {"error": "RecordInvalid", "description": "Record validation errors"}
        self.rules.append(FailureRule(method, fragment, status, body, on_call, exception=exception))

    def seed(self, collection: str, **fields) -> int:
        remote_id = next(self._ids)
        self.records[collection][remote_id] = {"id": remote_id, **fields}
        return remote_id

    def calls_for(self, method: str, fragment: str = "") -> List[Call]:
        return [c for c in self.calls if c.method == method and fragment in c.url]

    def url_for(self, path: str, **query) -> str:
        url = f"{self.base_url}{path}"
        if query:
            url = f"{url}?{urlencode(query)}"
        return url

    @staticmethod
    def _response(status: int, payload: Any = None, reason: str = "") -> ApiResponse:
        text = "" if payload is None else json.dumps(payload)
        return ApiResponse(status=status, reason=reason, text=text)

    async def request(self, method, url, headers=None, body=None) -> ApiResponse:
        self.calls.append(Call(method, url, body))
        for rule in self.rules:
            if rule.method == method and rule.fragment in url:
                rule.seen += 1
                if rule.on_call is None or rule.on_call == rule.seen:
                    if rule.exception is not None:
                        raise rule.exception
                    return self._response(rule.status, rule.body, reason="Unprocessable Entity")

        parsed = urlparse(url)
        parts = parsed.path.split("/")[3:]  # drop "", "api", "v2"
        if method == "POST" and len(parts) == 1:
            collection = parts[0].replace(".json", "")
            envelope = ENVELOPES[collection]
            remote_id = next(self._ids)
            record = {"id": remote_id, **body[envelope]}
            self.records[collection][remote_id] = record
            return self._response(201, {envelope: record}, reason="Created")
        if method == "POST" and parts[0] == "users" and parts[-1] == "identities.json":
            user_id = int(parts[1])
            self.identities.setdefault(user_id, []).append(body["identity"]["value"])
            return self._response(201, {"identity": {"user_id": user_id, **body["identity"]}}, reason="Created")
        if method == "GET" and len(parts) == 1:
            return self._list(parts[0].replace(".json", ""), parse_qs(parsed.query), parsed.path)
        if method == "DELETE" and len(parts) == 2:
            collection = parts[0]
            remote_id = int(parts[1].replace(".json", ""))
            if self.records[collection].pop(remote_id, None) is None:
                return self._response(404, {"error": "RecordNotFound", "description": "Not found"}, "Not Found")
            return self._response(204, None, reason="No Content")
        return self._response(404, {"error": "InvalidEndpoint"}, reason="Not Found")

    def _list(self, collection: str, query: Dict[str, List[str]], path: str) -> ApiResponse:
        items = [self.records[collection][k] for k in sorted(self.records[collection])]
        size = self.page_size or int(query.get("page[size]", [0])[0]) or len(items) or 1
        start = int(query.get("page[after]", [0])[0])
        page = items[start:start + size]
        has_more = start + size < len(items)
        payload = {
            collection: page,
            "meta": {"has_more": has_more},
            "links": {"next": self.url_for(path, **{"page[size]": size, "page[after]": start + size}) if has_more else None},
        }
        return self._response(200, payload, reason="OK")


@pytest.fixture
def helpdesk():
    return FakeHelpdesk()


@pytest.fixture
def provision_settings():
    return ProvisionSettings(count=3, label="Demo", run_prefix="nodegen")


@pytest.fixture
def pipeline_settings(tmp_path, provision_settings):
    return PipelineSettings(
        config_loader=None,
        tenant=TenantConfig(tenant_id=1, subdomain="acme", agent_email="agent@example.com", api_token="t0k"),
        provisioning=provision_settings,
        reclaim=ReclaimSettings(page_size=2),
        manifest_dir=str(tmp_path / "manifests"),
    )
