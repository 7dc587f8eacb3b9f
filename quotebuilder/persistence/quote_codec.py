"""Translate quotes to and from the persisted draft format.

The wire shape uses the field names of the draft blob::

    {"clientName", "clientAddress", "reference", "items", "taxInclusive", "currencyCode"}
    item: {"name", "qty", "rate", "discount", "taxPct"}

Missing or null fields fall back to defaults. Only structurally invalid
input raises :class:`DraftFormatError`.
"""
from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, Dict

from quotebuilder.domain.quote_models import DEFAULT_CURRENCY_CODE, Quote, QuoteItem
from quotebuilder.exceptions import DraftFormatError

# Decoded item quantity when the blob omits it; a freshly added line uses 0.
DEFAULT_DECODED_QUANTITY = 1.0


def encode_item(item: QuoteItem) -> Dict[str, Any]:
    return {
        "name": item.name,
        "qty": item.quantity,
        "rate": item.rate,
        "discount": item.discount_per_unit,
        "taxPct": item.tax_percent,
    }


def encode_quote(quote: Quote) -> Dict[str, Any]:
    """Return the JSON-compatible mapping for ``quote``."""
    return {
        "clientName": quote.client_name,
        "clientAddress": quote.client_address,
        "reference": quote.reference,
        "items": [encode_item(item) for item in quote.items],
        "taxInclusive": quote.tax_inclusive,
        "currencyCode": quote.currency_code,
    }


def decode_item(data: Any) -> QuoteItem:
    if not isinstance(data, Mapping):
        raise DraftFormatError(f"Quote item must be a mapping, got {type(data).__name__}")
    return QuoteItem(
        name=_text(data, "name", ""),
        quantity=_number(data, "qty", DEFAULT_DECODED_QUANTITY),
        rate=_number(data, "rate", 0.0),
        discount_per_unit=_number(data, "discount", 0.0),
        tax_percent=_number(data, "taxPct", 0.0),
    )


def decode_quote(data: Any) -> Quote:
    """Build a :class:`Quote` from a decoded draft mapping."""
    if not isinstance(data, Mapping):
        raise DraftFormatError(f"Quote must be a mapping, got {type(data).__name__}")

    raw_items = data.get("items")
    if raw_items is None:
        raw_items = []
    if isinstance(raw_items, (str, bytes)) or not isinstance(raw_items, Sequence):
        raise DraftFormatError(
            f"Quote items must be a sequence, got {type(raw_items).__name__}"
        )

    tax_inclusive = data.get("taxInclusive")
    if tax_inclusive is None:
        tax_inclusive = False
    elif not isinstance(tax_inclusive, bool):
        raise DraftFormatError("taxInclusive must be a boolean")

    return Quote(
        client_name=_text(data, "clientName", ""),
        client_address=_text(data, "clientAddress", ""),
        reference=_text(data, "reference", ""),
        items=[decode_item(entry) for entry in raw_items],
        tax_inclusive=tax_inclusive,
        currency_code=_text(data, "currencyCode", DEFAULT_CURRENCY_CODE),
    )


def dumps_quote(quote: Quote) -> str:
    """Serialize ``quote`` to a JSON draft blob."""
    return json.dumps(encode_quote(quote), ensure_ascii=False)


def loads_quote(blob: str) -> Quote:
    """Parse a JSON draft blob into a :class:`Quote`."""
    try:
        data = json.loads(blob)
    except (TypeError, ValueError, RecursionError) as exc:
        raise DraftFormatError(f"Draft is not valid JSON: {exc}") from exc
    return decode_quote(data)


# --------------------------------------------------------------------------- #
# Internal helpers
# --------------------------------------------------------------------------- #
def _text(data: Mapping, key: str, default: str) -> str:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise DraftFormatError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _number(data: Mapping, key: str, default: float) -> float:
    value = data.get(key)
    if value is None:
        return float(default)
    # bool is an int subclass; a flag in a numeric slot is a malformed draft
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DraftFormatError(f"{key} must be a number, got {type(value).__name__}")
    try:
        return float(value)
    except OverflowError as exc:
        raise DraftFormatError(f"{key} is out of range for a number") from exc
