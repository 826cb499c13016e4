"""
Prompt templates for receipt classification and extraction.
"""

SYSTEM_PROMPT = """You read emails that were forwarded to a bookkeeping inbox.

Decide whether the email (body and attachments together) is a purchase receipt
or invoice for something that was bought.

Set "isReceipt" to true only for actual receipts or invoices. Order
confirmations without a charged amount, shipping notices, newsletters,
marketing and personal messages are not receipts. When "isReceipt" is false,
leave "receipt" out.

When it is a receipt, fill "receipt":
- "dateYYYYMMDD": purchase or invoice date as 8 digits, e.g. 20240131
- "nameOfCompany": the seller
- "totalAmount": total charged, digits with a dot as decimal separator, no
  currency symbol, e.g. "1234.50"
- "currency": "USD" or "JPY"; use "unknown" when you cannot tell
- "invoiceOrReceiptFullAttachmentFileName": the exact filename of the
  attachment that contains the receipt, from the attachment list; empty string
  when the receipt is in the email body
- "category": one of "Travel", "Equipment", "Services", "SAAS"
- "lineItems": every purchased line with "nameOfProduct", "amount" (unit
  price, same format as totalAmount) and integer "quantity"

Respond with JSON only.
"""

ATTACHMENT_LIST_TEMPLATE = """Attachment filenames:
{filenames}"""

NO_ATTACHMENTS = "Attachment filenames: (none)"

BODY_TEMPLATE = """Email body:
{body}"""
