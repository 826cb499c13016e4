"""
Reply composer: summary email sent back to the person who forwarded the receipt.
"""

import html
from decimal import Decimal
from email.message import EmailMessage

from receipt_inbox.config import settings
from receipt_inbox.core.models import (
    InboundEmail,
    LedgerFailure,
    LedgerOutcome,
    LedgerSuccess,
    LineItem,
    Receipt,
)

DEFAULT_SUBJECT = "recent email"
UNPARSEABLE_TOTAL = "n/a"


def format_line_total(item: LineItem) -> str:
    total = item.line_total
    if total is None:
        return UNPARSEABLE_TOTAL
    return f"{total:.2f}"


def reply_subject(subject: str | None) -> str:
    return f"Re: {subject or DEFAULT_SUBJECT}"


def _unknown_outcome(outcome: object) -> TypeError:
    return TypeError(f"Unexpected ledger outcome: {outcome!r}")


class ReplyComposer:
    """Builds the plain-text + HTML summary reply."""

    def __init__(self, from_address: str | None = None):
        self.from_address = from_address or settings.reply_from_address

    def compose(
        self,
        email: InboundEmail,
        receipt: Receipt,
        outcome: LedgerOutcome,
        recipient: str,
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.from_address
        message["To"] = recipient
        message["Subject"] = reply_subject(email.subject)
        if email.message_id:
            message["In-Reply-To"] = email.message_id

        message.set_content(self.render_text(receipt, outcome))
        message.add_alternative(self.render_html(receipt, outcome), subtype="html")
        return message

    def render_text(self, receipt: Receipt, outcome: LedgerOutcome) -> str:
        lines = [
            f"Receipt from {receipt.company}",
            f"Company: {receipt.company}",
            f"Date: {receipt.date}",
            f"Total: {receipt.total_amount} {receipt.currency.value}",
            "",
            "Items:",
        ]
        for item in receipt.line_items:
            lines.append(f"- {item.name}: {item.amount} x {item.quantity}")
        if not receipt.line_items:
            lines.append("- (none extracted)")

        lines.append("")
        if isinstance(outcome, LedgerSuccess):
            lines.append(f"Ledger record: {outcome.record_url or outcome.record_id}")
        elif isinstance(outcome, LedgerFailure):
            lines.append(f"Ledger error: {outcome.error}")
        else:
            raise _unknown_outcome(outcome)

        return "\n".join(lines) + "\n"

    def render_html(self, receipt: Receipt, outcome: LedgerOutcome) -> str:
        esc = html.escape
        currency = esc(receipt.currency.value)

        rows = []
        grand_total = Decimal(0)
        for item in receipt.line_items:
            # unparseable amounts are shown as n/a and left out of the total
            if item.line_total is not None:
                grand_total += item.line_total
            rows.append(
                "<tr>"
                f"<td>{esc(item.name)}</td>"
                f'<td style="text-align:right">{esc(item.amount)}</td>'
                f'<td style="text-align:right">{item.quantity}</td>'
                f'<td style="text-align:right">{format_line_total(item)}</td>'
                "</tr>"
            )
        rows.append(
            "<tr>"
            '<td colspan="3"><strong>Total</strong></td>'
            f'<td style="text-align:right"><strong>{grand_total:.2f}</strong></td>'
            "</tr>"
        )

        if isinstance(outcome, LedgerSuccess):
            if outcome.record_url:
                url = esc(outcome.record_url, quote=True)
                ledger_html = f'<p>Ledger record: <a href="{url}">{esc(outcome.record_id)}</a></p>'
            else:
                ledger_html = f"<p>Ledger record: {esc(outcome.record_id)}</p>"
        elif isinstance(outcome, LedgerFailure):
            ledger_html = f'<p style="color:#b00020">Ledger error: {esc(outcome.error)}</p>'
        else:
            raise _unknown_outcome(outcome)

        return (
            "<html><body>"
            f"<h2>Receipt from {esc(receipt.company)}</h2>"
            f"<p>Date: {esc(receipt.date)}<br>"
            f"Total: {esc(receipt.total_amount)} {currency}<br>"
            f"Category: {esc(receipt.category.value)}</p>"
            '<table border="1" cellpadding="4" cellspacing="0">'
            "<thead><tr><th>Item</th><th>Amount</th><th>Qty</th>"
            f"<th>Line total ({currency})</th></tr></thead>"
            f"<tbody>{''.join(rows)}</tbody>"
            "</table>"
            f"{ledger_html}"
            "</body></html>"
        )
