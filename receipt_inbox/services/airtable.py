"""
Airtable API client for the exchange-rate and ledger tables.
"""

from typing import Any
from urllib.parse import quote

import requests

from receipt_inbox.config import settings
from receipt_inbox.core.exceptions import TabularStoreError
from receipt_inbox.core.logging import get_logger

log = get_logger(__name__)


class AirtableClient:
    """Client for Airtable REST API operations."""

    def __init__(
        self,
        base_path: str | None = None,
        api_key: str | None = None,
        timeout: int | None = None,
    ):
        self.base_path = (base_path or settings.airtable_base_path).rstrip("/")
        self.api_key = api_key or settings.airtable_api_key
        self.timeout = timeout or settings.airtable_timeout

    @property
    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _table_url(self, table: str) -> str:
        return f"{self.base_path}/{quote(table, safe='')}"

    def list_records(
        self,
        table: str,
        max_records: int = 100,
        sort_field: str | None = None,
        sort_direction: str = "desc",
    ) -> dict[str, Any]:
        """
        List records of a table.

        Args:
            table: Table name or id
            max_records: Upper bound on returned records
            sort_field: Field to sort by
            sort_direction: "asc" or "desc"

        Returns:
            Response JSON, shaped {"records": [...]}

        Raises:
            TabularStoreError: on transport errors or non-2xx responses
        """
        params: dict[str, Any] = {"maxRecords": max_records}
        if sort_field:
            params["sort[0][field]"] = sort_field
            params["sort[0][direction]"] = sort_direction

        try:
            response = requests.get(
                self._table_url(table),
                params=params,
                headers=self._auth_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.error("airtable_request_error", table=table, error=str(e))
            raise TabularStoreError(f"Failed to reach Airtable: {e}") from e

        if not response.ok:
            log.error(
                "airtable_list_error",
                table=table,
                status=response.status_code,
                response_body=response.text[:500],
            )
            raise TabularStoreError(
                f"Airtable list on {table!r} failed with status {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    def create_records(self, table: str, records: list[dict[str, Any]]) -> requests.Response:
        """
        Insert records into a table.

        Args:
            table: Table name or id
            records: Field dicts, wrapped as {"records": [{"fields": ...}]}

        Returns:
            The raw response; status handling is left to the caller.
        """
        payload = {"records": [{"fields": fields} for fields in records]}
        try:
            response = requests.post(
                self._table_url(table),
                json=payload,
                headers=self._auth_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.error("airtable_request_error", table=table, error=str(e))
            raise TabularStoreError(f"Failed to reach Airtable: {e}") from e

        if response.status_code != 200:
            log.error(
                "airtable_create_error",
                table=table,
                status=response.status_code,
                response_body=response.text[:500],
            )
        return response
