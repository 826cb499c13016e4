"""
Receipt inbox: turns forwarded purchase emails into ledger rows.

A small email processing pipeline that:
- Parses inbound MIME messages
- Classifies them and extracts receipt line items with Gemini
- Archives attachments to MinIO
- Records the receipt in an Airtable ledger with the day's exchange rate
- Replies to the sender with a summary
"""

__version__ = "1.0.0"
