"""Unit tests for the ledger recorder."""

from unittest.mock import MagicMock

import pytest

from receipt_inbox.core.exceptions import TabularStoreError
from receipt_inbox.core.models import Currency, LedgerFailure, LedgerSuccess
from receipt_inbox.services.ledger import (
    INSERT_FAILED_ERROR,
    UNKNOWN_CURRENCY_ERROR,
    UNPARSEABLE_TOTAL_ERROR,
    LedgerRecorder,
    build_receipt_url,
    find_rate_for_date,
    parse_exchange_rates,
)


def _recorder(airtable, record_url_base=""):
    return LedgerRecorder(
        airtable=airtable,
        uploads_base_url="https://uploads.example.com/",
        rates_table="Exchange Rates",
        ledger_table="Expenses",
        record_url_base=record_url_base,
    )


class TestRecordReceipt:
    """Tests for LedgerRecorder.record_receipt."""

    def test_success(self, mock_airtable, sample_receipt):
        outcome = _recorder(mock_airtable).record_receipt(sample_receipt, "123-abc")

        assert outcome == LedgerSuccess(record_id="rec123", record_url=None)

    def test_rate_query(self, mock_airtable, sample_receipt):
        _recorder(mock_airtable).record_receipt(sample_receipt, "123-abc")

        mock_airtable.list_records.assert_called_once_with(
            "Exchange Rates",
            max_records=100,
            sort_field="Date",
            sort_direction="desc",
        )

    def test_inserted_fields(self, mock_airtable, sample_receipt):
        _recorder(mock_airtable).record_receipt(sample_receipt, "123-abc")

        table, records = mock_airtable.create_records.call_args.args
        assert table == "Expenses"
        assert records == [{
            "Short Description": "Acme",
            "Date": ["recRate1"],
            "Amount (USD)": 47.5,
            "Category": "Equipment",
            "Notes": "Widget\nCable",
            "Receipt": [{"url": "https://uploads.example.com/123-abc/receipt.pdf"}],
        }]

    def test_amount_column_follows_currency(self, mock_airtable, sample_receipt):
        sample_receipt.currency = Currency.JPY
        sample_receipt.total_amount = "5000"

        _recorder(mock_airtable).record_receipt(sample_receipt, "123-abc")

        fields = mock_airtable.create_records.call_args.args[1][0]
        assert fields["Amount (JPY)"] == 5000.0
        assert "Amount (USD)" not in fields

    def test_thousands_separator_in_total(self, mock_airtable, sample_receipt):
        sample_receipt.currency = Currency.JPY
        sample_receipt.total_amount = "1,200"

        outcome = _recorder(mock_airtable).record_receipt(sample_receipt, "123-abc")

        assert isinstance(outcome, LedgerSuccess)
        fields = mock_airtable.create_records.call_args.args[1][0]
        assert fields["Amount (JPY)"] == 1200.0

    @pytest.mark.parametrize("total", ["", "about forty"])
    def test_unparseable_total_makes_no_calls(self, mock_airtable, sample_receipt, total):
        sample_receipt.total_amount = total

        outcome = _recorder(mock_airtable).record_receipt(sample_receipt, "123-abc")

        assert outcome == LedgerFailure(error=UNPARSEABLE_TOTAL_ERROR)
        mock_airtable.list_records.assert_not_called()
        mock_airtable.create_records.assert_not_called()

    def test_unknown_currency_makes_no_calls(self, mock_airtable, sample_receipt):
        sample_receipt.currency = Currency.UNKNOWN

        outcome = _recorder(mock_airtable).record_receipt(sample_receipt, "123-abc")

        assert outcome == LedgerFailure(error=UNKNOWN_CURRENCY_ERROR)
        mock_airtable.list_records.assert_not_called()
        mock_airtable.create_records.assert_not_called()

    def test_missing_rate_skips_insert(self, mock_airtable, sample_receipt):
        sample_receipt.date = "20231231"

        outcome = _recorder(mock_airtable).record_receipt(sample_receipt, "123-abc")

        assert isinstance(outcome, LedgerFailure)
        assert "20231231" in outcome.error
        mock_airtable.create_records.assert_not_called()

    def test_non_200_insert(self, mock_airtable, sample_receipt):
        mock_airtable.create_records.return_value = MagicMock(status_code=422)

        outcome = _recorder(mock_airtable).record_receipt(sample_receipt, "123-abc")

        assert outcome == LedgerFailure(error=INSERT_FAILED_ERROR)

    def test_record_url_when_configured(self, mock_airtable, sample_receipt):
        recorder = _recorder(mock_airtable, record_url_base="https://airtable.com/appX/tblY/")

        outcome = recorder.record_receipt(sample_receipt, "123-abc")

        assert outcome.record_url == "https://airtable.com/appX/tblY/rec123"

    def test_lookup_errors_propagate(self, mock_airtable, sample_receipt):
        mock_airtable.list_records.side_effect = TabularStoreError("down", status_code=503)

        with pytest.raises(TabularStoreError):
            _recorder(mock_airtable).record_receipt(sample_receipt, "123-abc")


class TestHelpers:

    def test_parse_exchange_rates(self, rates_response):
        rates = parse_exchange_rates(rates_response)

        assert [r.id for r in rates] == ["recRate2", "recRate1"]
        assert rates[1].date == "20240101"
        assert rates[1].jpy_per_usd == 141.0

    def test_parse_exchange_rates_bad_shape(self):
        with pytest.raises(TabularStoreError):
            parse_exchange_rates({"records": [{"id": "rec1", "fields": {}}]})

    def test_find_rate_exact_match_only(self, rates_response):
        rates = parse_exchange_rates(rates_response)

        assert find_rate_for_date(rates, "20240102").id == "recRate2"
        assert find_rate_for_date(rates, "2024-01-02") is None

    def test_find_rate_returns_first_match(self):
        rates = parse_exchange_rates({"records": [
            {"id": "recA", "fields": {"Date": "20240101", "JPY per USD": 140}},
            {"id": "recB", "fields": {"Date": "20240101", "JPY per USD": 141}},
        ]})
        assert find_rate_for_date(rates, "20240101").id == "recA"

    def test_build_receipt_url_strips_one_trailing_slash(self):
        assert (
            build_receipt_url("https://uploads.example.com/", "123-abc", "r.pdf")
            == "https://uploads.example.com/123-abc/r.pdf"
        )
        assert (
            build_receipt_url("https://uploads.example.com//", "123-abc", "r.pdf")
            == "https://uploads.example.com//123-abc/r.pdf"
        )
