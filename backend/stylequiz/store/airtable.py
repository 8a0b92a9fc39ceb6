"""Airtable collaborators.

Loads quiz content (clients, questions, templates) and stores result
records through the Airtable REST API. Both sit outside the scoring core:
the loader raises ContentUnavailable, the store raises PersistenceFailure,
and nothing here retries.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..config import settings
from ..core.errors import ContentUnavailable, PersistenceFailure
from ..core.models import QuizContent, ResultRecord
from ..core.records import record_to_fields
from .decoding import (
    FIELD_NAMES, client_from_record, questions_from_records, templates_from_records
)

logger = logging.getLogger(__name__)


class AirtableError(Exception):
    def __init__(self, status_code: int, details: str):
        self.status_code = status_code
        self.details = details
        super().__init__(f"Airtable error: {status_code}")


def _sort_params(sort: Optional[List[Dict[str, str]]]) -> Dict[str, str]:
    params = {}
    for i, s in enumerate(sort or []):
        params[f"sort[{i}][field]"] = s["field"]
        params[f"sort[{i}][direction]"] = s.get("direction", "asc")
    return params


class AirtableClient:
    """Minimal async client for one Airtable base"""

    def __init__(self, api_key: Optional[str] = None, base_id: Optional[str] = None,
                 api_url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key if api_key is not None else settings.AIRTABLE_API_KEY
        self.base_id = base_id or settings.AIRTABLE_BASE_ID
        self.api_url = (api_url or settings.AIRTABLE_API_URL).rstrip("/")
        self.timeout = timeout or settings.AIRTABLE_TIMEOUT
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _table_url(self, table: str) -> str:
        return f"{self.api_url}/{self.base_id}/{quote(table, safe='')}"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    async def fetch(self, table: str, filter_by_formula: Optional[str] = None,
                    sort: Optional[List[Dict[str, str]]] = None) -> List[Dict[str, Any]]:
        """
        List records of a table

        Raises:
            AirtableError: non-2xx response
            httpx.HTTPError: transport failure
        """
        params = _sort_params(sort)
        if filter_by_formula:
            params["filterByFormula"] = filter_by_formula

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self._table_url(table), params=params, headers=self._headers())

        if response.status_code >= 400:
            logger.error(f"Airtable fetch error: {response.status_code} {response.text}")
            raise AirtableError(response.status_code, response.text)

        return response.json().get("records", [])

    async def create(self, table: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Create one record; raises like fetch"""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self._table_url(table), json={"fields": fields}, headers=self._headers())

        if response.status_code >= 400:
            logger.error(f"Airtable create error: {response.status_code} {response.text}")
            raise AirtableError(response.status_code, response.text)

        return response.json()


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


class AirtableContentLoader:
    """Resolves a client slug to its active questions and templates"""

    def __init__(self, client: AirtableClient):
        self.client = client

    async def load(self, slug: str) -> QuizContent:
        """
        Raises:
            ContentUnavailable: unknown/inactive client, no active questions,
                missing credentials or an unreachable API
        """
        if not self.client.configured:
            raise ContentUnavailable("Airtable API key not configured")

        try:
            return await self._load(slug)
        except (AirtableError, httpx.HTTPError) as e:
            logger.error(f"Error loading quiz '{slug}': {e}")
            raise ContentUnavailable(f"Quiz content could not be loaded: {e}")

    async def _load(self, slug: str) -> QuizContent:
        fc, fq, ft = FIELD_NAMES["clients"], FIELD_NAMES["questions"], FIELD_NAMES["templates"]

        client_records = await self.client.fetch(
            "Clients",
            filter_by_formula=f"AND({{{fc['slug']}}} = '{_escape(slug)}', {{{fc['active']}}} = TRUE())"
        )
        if not client_records:
            raise ContentUnavailable(
                f'Quiz not found for "{slug}". Make sure the client exists and is marked as Active.'
            )
        try:
            client = client_from_record(client_records[0])
        except ValidationError as e:
            raise ContentUnavailable(f'Client record for "{slug}" is malformed: {e}')

        question_records = await self.client.fetch(
            "Questions",
            filter_by_formula=f"AND(FIND('{client.id}', ARRAYJOIN({{{fq['client']}}})), {{{fq['active']}}} = TRUE())",
            sort=[{"field": fq["order"], "direction": "asc"}]
        )
        questions = questions_from_records(question_records)
        if not questions:
            raise ContentUnavailable("No questions found for this client. Add questions and mark them as Active.")

        template_records = await self.client.fetch(
            "Templates",
            filter_by_formula=f"FIND('{client.id}', ARRAYJOIN({{{ft['client']}}}))",
            sort=[{"field": ft["order"], "direction": "asc"}]
        )

        content = QuizContent(
            client=client,
            questions=questions,
            templates=templates_from_records(template_records)
        )
        logger.info(
            f"Loaded quiz '{slug}': {len(content.questions)} questions, {len(content.templates)} templates"
        )
        return content


class AirtableResultStore:
    """Writes result records to the Results table"""

    TABLE = "Results"

    def __init__(self, client: AirtableClient):
        self.client = client

    async def save(self, record: ResultRecord) -> None:
        """
        Raises:
            PersistenceFailure: write rejected or API unreachable
        """
        try:
            await self.client.create(self.TABLE, record_to_fields(record))
        except (AirtableError, httpx.HTTPError) as e:
            raise PersistenceFailure(str(e)) from e
