"""Tests for the Artifactory client (HTTP mocked with respx)."""

import httpx
import pytest
import respx

from rt_retention.core.errors import ConfigurationError, StoreCommunicationError
from rt_retention.core.models import DeleteDescriptor, ResultItem
from rt_retention.settings import Settings
from rt_retention.store.artifactory import ArtifactoryClient, TransientStoreError

BASE_URL = "https://rt.example.com/artifactory"
SEARCH_URL = f"{BASE_URL}/api/search/aql"

AQL_RESULTS = {
    "results": [
        {"repo": "libs", "path": "org/acme/1.0", "name": "acme.jar", "type": "file", "size": 10},
        {"repo": "libs", "path": ".", "name": "root.txt", "type": "file"},
    ],
    "range": {"start_pos": 0, "end_pos": 2, "total": 2},
}


@pytest.fixture
def client():
    with ArtifactoryClient(BASE_URL, access_token="secret-token", retries=2, retry_wait=0) as client:
        yield client


def descriptor(**kwargs) -> DeleteDescriptor:
    kwargs.setdefault("aql", {"repo": "libs"})
    return DeleteDescriptor(**kwargs)


# ============================================================================
# Search
# ============================================================================


@respx.mock
def test_search_posts_aql_and_yields_items(client):
    route = respx.post(SEARCH_URL).mock(return_value=httpx.Response(200, json=AQL_RESULTS))

    with client.search(descriptor(limit=2)) as results:
        items = list(results)

    assert items == [
        ResultItem(repo="libs", path="org/acme/1.0", name="acme.jar"),
        ResultItem(repo="libs", path=".", name="root.txt"),
    ]
    request = route.calls.last.request
    assert request.content.decode() == (
        'items.find({"repo": "libs"}).include("repo","path","name","type").limit(2)'
    )
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert request.headers["Content-Type"] == "text/plain"


@respx.mock
def test_search_with_basic_auth():
    route = respx.post(SEARCH_URL).mock(return_value=httpx.Response(200, json={"results": []}))

    with ArtifactoryClient(BASE_URL, user="admin", password="pw", retry_wait=0) as client:
        with client.search(descriptor()) as results:
            assert list(results) == []

    assert route.calls.last.request.headers["Authorization"].startswith("Basic ")


@respx.mock
def test_search_retries_server_errors(client):
    route = respx.post(SEARCH_URL).mock(
        side_effect=[
            httpx.Response(503, text="unavailable"),
            httpx.Response(200, json=AQL_RESULTS),
        ]
    )

    with client.search(descriptor()) as results:
        assert len(list(results)) == 2

    assert route.call_count == 2


@respx.mock
def test_search_gives_up_after_retries(client):
    route = respx.post(SEARCH_URL).mock(return_value=httpx.Response(502, text="bad gateway"))

    with pytest.raises(TransientStoreError, match="502"):
        with client.search(descriptor()):
            pass

    assert route.call_count == 3


@respx.mock
def test_search_does_not_retry_client_errors(client):
    route = respx.post(SEARCH_URL).mock(
        return_value=httpx.Response(400, text="Failed to parse query")
    )

    with pytest.raises(StoreCommunicationError, match="Failed to parse query") as exc_info:
        with client.search(descriptor()):
            pass

    assert not isinstance(exc_info.value, TransientStoreError)
    assert route.call_count == 1


@respx.mock
def test_search_transport_error_is_store_error(client):
    respx.post(SEARCH_URL).mock(side_effect=httpx.ConnectError("connection refused"))

    with pytest.raises(StoreCommunicationError, match="connection refused"):
        with client.search(descriptor()):
            pass


@respx.mock
def test_search_unreadable_response(client):
    respx.post(SEARCH_URL).mock(return_value=httpx.Response(200, text="<html>login</html>"))

    with pytest.raises(StoreCommunicationError, match="Unreadable"):
        with client.search(descriptor()) as results:
            list(results)


@respx.mock
def test_search_unexpected_item(client):
    respx.post(SEARCH_URL).mock(
        return_value=httpx.Response(200, json={"results": [{"repo": "libs"}]})
    )

    with pytest.raises(StoreCommunicationError, match="Unexpected AQL result"):
        with client.search(descriptor()) as results:
            list(results)


# ============================================================================
# Delete
# ============================================================================


@respx.mock
def test_delete_removes_each_item(client):
    nested = respx.delete(f"{BASE_URL}/libs/org/acme/1.0/acme.jar").mock(
        return_value=httpx.Response(204)
    )
    at_root = respx.delete(f"{BASE_URL}/libs/root.txt").mock(return_value=httpx.Response(204))

    deleted = client.delete(
        [
            ResultItem(repo="libs", path="org/acme/1.0", name="acme.jar"),
            ResultItem(repo="libs", path=".", name="root.txt"),
        ]
    )

    assert deleted == 2
    assert nested.called and at_root.called


@respx.mock
def test_delete_treats_missing_items_as_done(client):
    respx.delete(f"{BASE_URL}/libs/gone.jar").mock(return_value=httpx.Response(404))

    assert client.delete([ResultItem(repo="libs", path=".", name="gone.jar")]) == 0


def test_delete_nothing(client):
    assert client.delete([]) == 0


@respx.mock
def test_delete_continues_past_failures(client):
    respx.delete(f"{BASE_URL}/libs/a.jar").mock(return_value=httpx.Response(403, text="Forbidden"))
    second = respx.delete(f"{BASE_URL}/libs/b.jar").mock(return_value=httpx.Response(204))

    with pytest.raises(StoreCommunicationError, match="Deleted 1 of 2 item"):
        client.delete(
            [
                ResultItem(repo="libs", path=".", name="a.jar"),
                ResultItem(repo="libs", path=".", name="b.jar"),
            ]
        )

    assert second.called


@respx.mock
def test_delete_quotes_paths(client):
    route = respx.delete(f"{BASE_URL}/libs/with%20space/a%23b.jar").mock(
        return_value=httpx.Response(204)
    )

    client.delete([ResultItem(repo="libs", path="with space", name="a#b.jar")])

    assert route.called


# ============================================================================
# Settings
# ============================================================================


def test_from_settings_requires_url():
    with pytest.raises(ConfigurationError, match="RT_RETENTION_URL"):
        ArtifactoryClient.from_settings(Settings(url=None))


def test_from_settings(monkeypatch):
    monkeypatch.setenv("RT_RETENTION_URL", BASE_URL + "/")
    monkeypatch.setenv("RT_RETENTION_ACCESS_TOKEN", "tok")
    monkeypatch.setenv("RT_RETENTION_RETRIES", "0")

    with ArtifactoryClient.from_settings(Settings()) as client:
        assert client.base_url == BASE_URL + "/"
