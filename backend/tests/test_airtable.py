"""Tests for the Airtable content loader and result store."""

import asyncio
import json

import httpx
import pytest

from stylequiz.core.errors import ContentUnavailable, PersistenceFailure
from stylequiz.core.models import ResultRecord
from stylequiz.store.airtable import AirtableClient, AirtableContentLoader, AirtableResultStore


CLIENT_RECORD = {"id": "recClient1", "fields": {"Name": "Acme", "Slug": "acme", "Active": True}}
QUESTION_RECORDS = [
    {"id": "recQ1", "fields": {"Order": 1, "Question Text": "Layout", "Option A Traits": '{"minimal": 1}',
                               "Option B Traits": '{"rich": 1}'}},
    {"id": "recQ2", "fields": {"Order": 2, "Question Text": "Colour", "Option A Traits": '{"warm": 2}',
                               "Option B Traits": '{"cool": 2}'}},
]
TEMPLATE_RECORDS = [
    {"id": "recT1", "fields": {"Name": "Clean", "Match Profile": '{"minimal": "high"}', "Order": 1}},
]


def make_transport(tables, requests_seen, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        table = request.url.path.rsplit("/", 1)[-1]
        if request.method == "POST":
            return httpx.Response(status_code, json={"id": "recResult1", "fields": json.loads(request.content)["fields"]})
        return httpx.Response(status_code, json={"records": tables.get(table, [])})
    return httpx.MockTransport(handler)


def make_client(tables, requests_seen, status_code=200):
    return AirtableClient(
        api_key="key123",
        base_id="appTest",
        api_url="https://airtable.test/v0",
        transport=make_transport(tables, requests_seen, status_code)
    )


def test_load_content():
    seen = []
    client = make_client({"Clients": [CLIENT_RECORD], "Questions": QUESTION_RECORDS,
                          "Templates": TEMPLATE_RECORDS}, seen)

    content = asyncio.run(AirtableContentLoader(client).load("acme"))

    assert content.client.id == "recClient1"
    assert [q.id for q in content.questions] == ["recQ1", "recQ2"]
    assert content.questions[1].option_b.traits == {"cool": 2}
    assert content.templates[0].match_profile == {"minimal": "high"}

    clients_request, questions_request, templates_request = seen
    assert clients_request.headers["Authorization"] == "Bearer key123"
    assert "acme" in clients_request.url.params["filterByFormula"]
    assert questions_request.url.params["sort[0][field]"] == "Order"
    assert questions_request.url.params["sort[0][direction]"] == "asc"
    assert "recClient1" in templates_request.url.params["filterByFormula"]


def test_unknown_client_is_content_unavailable():
    client = make_client({"Clients": []}, [])
    with pytest.raises(ContentUnavailable, match="Quiz not found"):
        asyncio.run(AirtableContentLoader(client).load("nobody"))


def test_client_without_questions_is_content_unavailable():
    client = make_client({"Clients": [CLIENT_RECORD], "Questions": []}, [])
    with pytest.raises(ContentUnavailable, match="No questions"):
        asyncio.run(AirtableContentLoader(client).load("acme"))


def test_malformed_question_is_skipped_on_load():
    broken = {"id": "recQ9", "fields": {"Order": 2.5, "Option A Traits": '{"bold": 1}'}}
    client = make_client({"Clients": [CLIENT_RECORD], "Questions": [*QUESTION_RECORDS, broken],
                          "Templates": TEMPLATE_RECORDS}, [])

    content = asyncio.run(AirtableContentLoader(client).load("acme"))
    assert [q.id for q in content.questions] == ["recQ1", "recQ2"]


def test_only_malformed_questions_is_content_unavailable():
    broken = {"id": "recQ9", "fields": {"Order": 2.5}}
    client = make_client({"Clients": [CLIENT_RECORD], "Questions": [broken]}, [])
    with pytest.raises(ContentUnavailable, match="No questions"):
        asyncio.run(AirtableContentLoader(client).load("acme"))


def test_malformed_client_is_content_unavailable():
    bad_client = {"id": "recClient1", "fields": {"Name": "Acme", "Slug": 7}}
    client = make_client({"Clients": [bad_client]}, [])
    with pytest.raises(ContentUnavailable, match="malformed"):
        asyncio.run(AirtableContentLoader(client).load("acme"))


def test_api_error_is_content_unavailable():
    client = make_client({}, [], status_code=500)
    with pytest.raises(ContentUnavailable):
        asyncio.run(AirtableContentLoader(client).load("acme"))


def test_missing_api_key_is_content_unavailable():
    client = AirtableClient(api_key="", base_id="appTest")
    with pytest.raises(ContentUnavailable, match="not configured"):
        asyncio.run(AirtableContentLoader(client).load("acme"))


def _record():
    return ResultRecord(
        session_id="1-abc", submitted_at="2024-01-01T00:00:00.000Z", scores="{}",
        answers="[]", top_traits="", client_id="recClient1"
    )


def test_result_store_posts_fields():
    seen = []
    asyncio.run(AirtableResultStore(make_client({}, seen)).save(_record()))

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/v0/appTest/Results"
    body = json.loads(request.content)
    assert body["fields"]["Session ID"] == "1-abc"
    assert body["fields"]["Client"] == ["recClient1"]


def test_result_store_rejection_is_persistence_failure():
    store = AirtableResultStore(make_client({}, [], status_code=422))
    with pytest.raises(PersistenceFailure):
        asyncio.run(store.save(_record()))
