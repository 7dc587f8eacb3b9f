"""Pure calculation helpers for quote line items."""
from __future__ import annotations

from typing import Iterable

from quotebuilder.domain.quote_models import CalcResult, QuoteItem, QuoteTotals
from quotebuilder.exceptions import CalculationError


def effective_rate(item: QuoteItem) -> float:
    """Return the unit rate after the per-unit discount (may be negative)."""
    return item.rate - item.discount_per_unit


def discount_amount(item: QuoteItem) -> float:
    """Return the total discount granted on the line."""
    return item.discount_per_unit * item.quantity


def compute_line_totals(item: QuoteItem, tax_inclusive: bool) -> CalcResult:
    """Return net, tax and total for ``item`` under the given tax mode.

    In exclusive mode the discounted amount is the net and tax is added on
    top. In inclusive mode the discounted amount is the gross; net and tax
    are backed out of it and the total stays equal to the gross.
    """
    base = effective_rate(item) * item.quantity
    if not tax_inclusive:
        tax = base * (item.tax_percent / 100.0)
        return CalcResult(net=base, tax=tax, total=base + tax)

    divisor = 1 + (item.tax_percent / 100.0)
    if divisor == 0:
        raise CalculationError(
            f"Cannot back tax out of an inclusive amount at {item.tax_percent}%"
        )
    net = base / divisor
    return CalcResult(net=net, tax=base - net, total=base)


def compute_quote_totals(
    items: Iterable[QuoteItem], tax_inclusive: bool
) -> QuoteTotals:
    """Fold line totals over ``items`` in order."""
    subtotal = tax = total = 0.0
    for item in items:
        result = compute_line_totals(item, tax_inclusive)
        subtotal += result.net
        tax += result.tax
        total += result.total
    return QuoteTotals(subtotal_net=subtotal, total_tax=tax, grand_total=total)
