"""Presenter producing display-ready data for the quote preview."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from quotebuilder.domain.quote_models import Quote, QuoteItem, QuoteStatus
from quotebuilder.services.currency_format import format_currency, format_percent, format_quantity
from quotebuilder.services.quote_calculator import (
    compute_line_totals,
    compute_quote_totals,
    discount_amount,
)

EMPTY_NAME_PLACEHOLDER = "-"
PAYMENT_TERMS = "Terms: Payment required within 30 days."


@dataclass(frozen=True)
class PreviewLine:
    """One printed line item."""

    name: str
    detail: str
    quantity: str
    rate: str
    total: str


@dataclass(frozen=True)
class PreviewTotalLine:
    label: str
    amount: str
    emphasized: bool = False


@dataclass(frozen=True)
class QuotePreview:
    """Everything the print layout needs, already formatted."""

    client_name: str
    client_address: str
    reference: str
    status: str
    tax_mode: str
    lines: Sequence[PreviewLine]
    totals: Sequence[PreviewTotalLine]
    terms: str = PAYMENT_TERMS


@dataclass(frozen=True)
class QuoteSummary:
    """Compact summary shown next to the editing form."""

    client_name: str
    item_count: int
    subtotal: str
    grand_total: str


class QuotePreviewPresenter:
    """Turn a :class:`Quote` into formatted preview and summary data."""

    def __init__(self, formatter: Callable[[float, str], str] = format_currency) -> None:
        self._format = formatter

    def build_preview(self, quote: Quote, status: QuoteStatus = QuoteStatus.DRAFT) -> QuotePreview:
        code = quote.currency_code
        lines = tuple(self._build_line(item, quote.tax_inclusive, code) for item in quote.items)
        totals = compute_quote_totals(quote.items, quote.tax_inclusive)
        return QuotePreview(
            client_name=quote.client_name,
            client_address=quote.client_address,
            reference=quote.reference,
            status=status.display_name(),
            tax_mode="Tax inclusive" if quote.tax_inclusive else "Tax exclusive",
            lines=lines,
            totals=(
                PreviewTotalLine("Subtotal (Net)", self._format(totals.subtotal_net, code)),
                PreviewTotalLine("Total Tax", self._format(totals.total_tax, code)),
                PreviewTotalLine("GRAND TOTAL", self._format(totals.grand_total, code), emphasized=True),
            ),
        )

    def build_summary(self, quote: Quote) -> QuoteSummary:
        totals = compute_quote_totals(quote.items, quote.tax_inclusive)
        return QuoteSummary(
            client_name=quote.client_name,
            item_count=len(quote.items),
            subtotal=self._format(totals.subtotal_net, quote.currency_code),
            grand_total=self._format(totals.grand_total, quote.currency_code),
        )

    def _build_line(self, item: QuoteItem, tax_inclusive: bool, code: str) -> PreviewLine:
        result = compute_line_totals(item, tax_inclusive)
        detail = (
            f"Tax: {format_percent(item.tax_percent)} | "
            f"Discount: {self._format(discount_amount(item), code)}"
        )
        return PreviewLine(
            name=item.name or EMPTY_NAME_PLACEHOLDER,
            detail=detail,
            quantity=format_quantity(item.quantity),
            rate=self._format(item.rate, code),
            total=self._format(result.total, code),
        )
