"""
Ledger recorder: writes one Airtable row per confirmed receipt.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from receipt_inbox.config import settings
from receipt_inbox.core.exceptions import TabularStoreError
from receipt_inbox.core.logging import get_logger
from receipt_inbox.core.models import (
    Currency,
    ExchangeRateRecord,
    LedgerFailure,
    LedgerOutcome,
    LedgerSuccess,
    Receipt,
    parse_amount,
)
from receipt_inbox.services.airtable import AirtableClient

log = get_logger(__name__)

RATE_LOOKUP_LIMIT = 100

UNKNOWN_CURRENCY_ERROR = "Currency could not be determined from the receipt"
INSERT_FAILED_ERROR = "Failed to create ledger record"
UNPARSEABLE_TOTAL_ERROR = "Total amount could not be read from the receipt"


class _RateFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str = Field(alias="Date")
    jpy_per_usd: float = Field(alias="JPY per USD")


class _RateRow(BaseModel):
    id: str
    fields: _RateFields


class _RateList(BaseModel):
    records: list[_RateRow]


def parse_exchange_rates(data: dict[str, Any]) -> list[ExchangeRateRecord]:
    """
    Decode the exchange-rate listing.

    Raises:
        TabularStoreError: if the response does not match the expected shape
    """
    try:
        parsed = _RateList.model_validate(data)
    except ValidationError as e:
        raise TabularStoreError(f"Unexpected exchange rate response: {e}") from e
    return [
        ExchangeRateRecord(id=row.id, date=row.fields.date, jpy_per_usd=row.fields.jpy_per_usd)
        for row in parsed.records
    ]


def find_rate_for_date(rates: list[ExchangeRateRecord], date: str) -> ExchangeRateRecord | None:
    """First record whose date equals the given string exactly."""
    for rate in rates:
        if rate.date == date:
            return rate
    return None


def build_receipt_url(base_url: str, correlation_id: str, filename: str) -> str:
    return f"{base_url.removesuffix('/')}/{correlation_id}/{filename}"


class LedgerRecorder:
    """Records receipts in the ledger table."""

    def __init__(
        self,
        airtable: AirtableClient | None = None,
        uploads_base_url: str | None = None,
        rates_table: str | None = None,
        ledger_table: str | None = None,
        record_url_base: str | None = None,
    ):
        self.airtable = airtable or AirtableClient()
        self.uploads_base_url = uploads_base_url or settings.uploads_base_url
        self.rates_table = rates_table or settings.airtable_exchange_rates_table
        self.ledger_table = ledger_table or settings.airtable_ledger_table
        self.record_url_base = (
            record_url_base if record_url_base is not None
            else settings.airtable_ledger_record_url
        )

    def record_receipt(self, receipt: Receipt, correlation_id: str) -> LedgerOutcome:
        """
        Look up the exchange rate for the receipt date and insert the ledger row.

        1. Unknown currency or unreadable total fails without any Airtable call
        2. Fetch the latest exchange-rate rows
        3. Match the receipt date exactly
        4. Insert the ledger row referencing rate and archived receipt

        Unexpected errors propagate; the caller turns them into LedgerFailure.
        """
        if receipt.currency == Currency.UNKNOWN:
            log.warning("ledger_unknown_currency", company=receipt.company)
            return LedgerFailure(error=UNKNOWN_CURRENCY_ERROR)

        if parse_amount(receipt.total_amount) is None:
            log.warning("ledger_unparseable_total", total=receipt.total_amount)
            return LedgerFailure(error=UNPARSEABLE_TOTAL_ERROR)

        data = self.airtable.list_records(
            self.rates_table,
            max_records=RATE_LOOKUP_LIMIT,
            sort_field="Date",
            sort_direction="desc",
        )
        rates = parse_exchange_rates(data)

        rate = find_rate_for_date(rates, receipt.date)
        if rate is None:
            log.warning("ledger_rate_missing", date=receipt.date, rates_checked=len(rates))
            return LedgerFailure(error=f"No exchange rate found for date {receipt.date}")

        receipt_url = build_receipt_url(
            self.uploads_base_url,
            correlation_id,
            receipt.attachment_filename,
        )
        fields = self.build_fields(receipt, rate, receipt_url)

        response = self.airtable.create_records(self.ledger_table, [fields])
        if response.status_code != 200:
            return LedgerFailure(error=INSERT_FAILED_ERROR)

        record_id = response.json()["records"][0]["id"]
        log.info(
            "ledger_record_created",
            record_id=record_id,
            company=receipt.company,
            total=receipt.total_amount,
            currency=receipt.currency.value,
        )
        return LedgerSuccess(record_id=record_id, record_url=self._record_url(record_id))

    def build_fields(
        self,
        receipt: Receipt,
        rate: ExchangeRateRecord,
        receipt_url: str,
    ) -> dict[str, Any]:
        """Ledger row; the amount column depends on the receipt currency."""
        return {
            "Short Description": receipt.company,
            "Date": [rate.id],
            f"Amount ({receipt.currency.value})": float(parse_amount(receipt.total_amount)),
            "Category": receipt.category.value,
            "Notes": "\n".join(item.name for item in receipt.line_items),
            "Receipt": [{"url": receipt_url}],
        }

    def _record_url(self, record_id: str) -> str | None:
        if not self.record_url_base:
            return None
        return f"{self.record_url_base.removesuffix('/')}/{record_id}"
