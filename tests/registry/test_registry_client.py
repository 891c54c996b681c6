"""Tests for the registry client.

HTTP is served by httpx.MockTransport; sleeps are recorded instead of taken.
"""

import httpx
import pytest
from kiro_agent_cli.registry.client import USER_AGENT
from kiro_agent_cli.registry.client import BundleNotFound
from kiro_agent_cli.registry.client import RegistryClient
from kiro_agent_cli.registry.client import RegistryError
from kiro_agent_cli.registry.client import RegistryUnavailable
from kiro_agent_cli.settings import DEFAULT_REGISTRY_URL

REGISTRY_URL = "https://registry.test/agents.json"


class FakeRegistry:
    """Serves a catalog and records every request."""

    def __init__(self, catalog=None, failures=0, archive=b""):
        self.catalog = catalog
        self.failures = failures
        self.archive = archive
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.failures:
            self.failures -= 1
            raise httpx.ConnectError("connection refused", request=request)
        if request.url.path.endswith(".zip"):
            return httpx.Response(200, content=self.archive)
        return httpx.Response(200, json=self.catalog)


@pytest.fixture
def catalog(manifest_data):
    return {
        "version": "1.0.0",
        "featured": ["aws-expert"],
        "bundles": [
            manifest_data("aws-expert", name="AWS Expert", description="Cloud architecture", tags=["aws"]),
            manifest_data(
                "python-helper",
                name="Python Helper",
                description="Writes tests",
                categories=["Development"],
                downloadUrl="https://registry.test/bundles/python-helper.zip",
            ),
            manifest_data("data-tools", name="Data Tools", description="Pandas and AWS Glue", tags=["data"]),
        ],
    }


def make_client(handler, sleeps=None, **kwargs):
    recorded = sleeps if sleeps is not None else []
    return RegistryClient(
        registry_url=REGISTRY_URL,
        sleep=recorded.append,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_fetch_bundle_makes_one_request(catalog):
    registry = FakeRegistry(catalog)
    with make_client(registry) as client:
        bundle = client.fetch_bundle("python-helper")

    assert bundle.name == "Python Helper"
    assert len(registry.requests) == 1
    assert str(registry.requests[0].url) == REGISTRY_URL


def test_requests_send_user_agent(catalog):
    registry = FakeRegistry(catalog)
    with make_client(registry) as client:
        client.list_bundles()

    assert registry.requests[0].headers["User-Agent"] == USER_AGENT
    assert USER_AGENT.startswith("kiro-agent-cli/")


def test_unknown_bundle_raises_not_found_without_retry(catalog):
    registry = FakeRegistry(catalog)
    sleeps = []
    with make_client(registry, sleeps) as client, pytest.raises(BundleNotFound, match="not found in registry"):
        client.fetch_bundle("missing-bundle")

    assert len(registry.requests) == 1
    assert sleeps == []


def test_unreachable_registry_retries_then_fails():
    """Test three attempts with 1s then 2s backoff, and no sleep after the last attempt."""
    registry = FakeRegistry(failures=10)
    sleeps = []

    with make_client(registry, sleeps) as client, pytest.raises(RegistryUnavailable) as exc_info:
        client.list_bundles()

    assert len(registry.requests) == 3
    assert sleeps == [1.0, 2.0]
    assert "Unable to connect to registry" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_transient_failure_recovers(catalog):
    registry = FakeRegistry(catalog, failures=1)
    sleeps = []

    with make_client(registry, sleeps) as client:
        bundles = client.list_bundles()

    assert [b.id for b in bundles] == ["aws-expert", "python-helper", "data-tools"]
    assert len(registry.requests) == 2
    assert sleeps == [1.0]


def test_http_error_status_is_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503)

    with make_client(handler) as client, pytest.raises(RegistryUnavailable):
        client.fetch_catalog()

    assert len(calls) == 3


def test_non_json_body_is_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, text="<html>maintenance</html>")

    with make_client(handler) as client, pytest.raises(RegistryUnavailable):
        client.fetch_catalog()

    assert len(calls) == 3


def test_malformed_catalog_is_not_retried():
    registry = FakeRegistry({"version": "1.0.0", "bundles": [{"id": "x"}]})

    with make_client(registry) as client, pytest.raises(RegistryError, match="malformed"):
        client.fetch_catalog()

    assert len(registry.requests) == 1


def test_fetch_catalog_keeps_featured(catalog):
    with make_client(FakeRegistry(catalog)) as client:
        assert client.fetch_catalog().featured == ["aws-expert"]


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ("aws", ["aws-expert", "data-tools"]),
        ("PYTHON", ["python-helper"]),
        ("develop", ["python-helper"]),
        ("tests", ["python-helper"]),
        ("nothing-matches", []),
    ],
)
def test_search_matches_fields_case_insensitively_in_catalog_order(catalog, query, expected):
    with make_client(FakeRegistry(catalog)) as client:
        assert [b.id for b in client.search_bundles(query)] == expected


def test_download_bundle_writes_archive(catalog, tmp_path):
    registry = FakeRegistry(catalog, archive=b"PK\x03\x04fake")
    destination = tmp_path / "downloads" / "python-helper.zip"

    with make_client(registry) as client:
        result = client.download_bundle("python-helper", destination)

    assert result == destination
    assert destination.read_bytes() == b"PK\x03\x04fake"
    assert str(registry.requests[-1].url) == "https://registry.test/bundles/python-helper.zip"


def test_download_bundle_without_url_is_an_error(catalog, tmp_path):
    with make_client(FakeRegistry(catalog)) as client, pytest.raises(RegistryError, match="download URL"):
        client.download_bundle("aws-expert", tmp_path / "a.zip")


def test_default_url_comes_from_settings(monkeypatch):
    with RegistryClient(transport=httpx.MockTransport(FakeRegistry())) as client:
        assert client.registry_url == DEFAULT_REGISTRY_URL

    monkeypatch.setenv("KIRO_AGENT_REGISTRY_URL", "https://mirror.test/agents.json")
    with RegistryClient(transport=httpx.MockTransport(FakeRegistry())) as client:
        assert client.registry_url == "https://mirror.test/agents.json"
