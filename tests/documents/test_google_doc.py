"""Tests for the Google Drive document backend, against a mocked Drive API."""

import json

import httpx
import pytest

from incidentbot.config import BotConfig
from incidentbot.documents import google_doc
from incidentbot.documents.google_doc import GoogleDoc, google_doc_factory
from incidentbot.errors import DocumentError


class FakeCredentials:
    async def token(self):
        return "test-token"


@pytest.fixture
def drive(monkeypatch):
    """Route every httpx request to a handler the test controls."""
    requests: list[httpx.Request] = []
    responses: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        for (method, path), response in responses.items():
            if request.method == method and request.url.path.endswith(path):
                return response
        return httpx.Response(404, json={"error": "not found"})

    real_client = httpx.AsyncClient
    transport = httpx.MockTransport(handler)
    monkeypatch.setattr(
        google_doc.httpx, "AsyncClient", lambda **kwargs: real_client(transport=transport, **kwargs)
    )
    return requests, responses


def _doc_config(**overrides):
    values = dict(_env_file=None, doc_template_id="template-1", doc_folder="folder-1")
    values.update(overrides)
    return BotConfig(**values)


@pytest.mark.asyncio
async def test_create_from_template(drive):
    requests, responses = drive
    responses[("POST", "/files/template-1/copy")] = httpx.Response(200, json={"id": "doc-42", "name": "x"})

    doc = GoogleDoc(FakeCredentials())
    document_id = await doc.create_from_template("2024-05-01 Website outage (#4)", _doc_config())

    assert document_id == "doc-42"
    assert doc.id() == "doc-42"
    assert doc.url() == "https://docs.google.com/document/d/doc-42/edit"
    body = json.loads(requests[0].content)
    assert body == {"name": "2024-05-01 Website outage (#4)", "parents": ["folder-1"]}
    assert requests[0].headers["Authorization"] == "Bearer test-token"
    assert requests[0].url.params["supportsAllDrives"] == "true"


@pytest.mark.asyncio
async def test_create_shares_with_domain(drive):
    requests, responses = drive
    responses[("POST", "/files/template-1/copy")] = httpx.Response(200, json={"id": "doc-42"})
    responses[("POST", "/files/doc-42/permissions")] = httpx.Response(200, json={"id": "perm-1"})

    await GoogleDoc(FakeCredentials()).create_from_template("t", _doc_config(doc_domain="example.org"))

    permission = json.loads(requests[1].content)
    assert permission["type"] == "domain"
    assert permission["domain"] == "example.org"
    assert permission["role"] == "writer"


@pytest.mark.asyncio
async def test_create_failure(drive):
    _, responses = drive
    responses[("POST", "/files/template-1/copy")] = httpx.Response(403, json={"error": "forbidden"})

    doc = GoogleDoc(FakeCredentials())
    with pytest.raises(DocumentError, match="HTTP 403"):
        await doc.create_from_template("t", _doc_config())
    assert doc.url() == "<not available>"


@pytest.mark.asyncio
async def test_create_without_template():
    with pytest.raises(DocumentError, match="No document template"):
        await GoogleDoc(FakeCredentials()).create_from_template("t", BotConfig(_env_file=None))


@pytest.mark.asyncio
async def test_load_by_id(drive):
    _, responses = drive
    responses[("GET", "/files/doc-7")] = httpx.Response(200, json={"id": "doc-7"})

    doc = GoogleDoc(FakeCredentials())
    await doc.load_by_id("doc-7")
    assert doc.url() == "https://docs.google.com/document/d/doc-7/edit"


@pytest.mark.asyncio
async def test_load_missing(drive):
    with pytest.raises(DocumentError, match="doc-7"):
        await GoogleDoc(FakeCredentials()).load_by_id("doc-7")


def test_factory_disabled_without_credentials():
    assert google_doc_factory(BotConfig(_env_file=None)) is None
