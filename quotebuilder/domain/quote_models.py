"""Domain models for quotes and their line items."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List

DEFAULT_CURRENCY_CODE = "INR"


class QuoteStatus(Enum):
    """Workflow state of the live quote, independent of its field values."""

    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"

    def display_name(self) -> str:
        """Return the user-friendly display name for this status."""
        return self.name.capitalize()

    def is_draft(self) -> bool:
        return self is self.DRAFT

    def is_sent(self) -> bool:
        return self is self.SENT

    def is_accepted(self) -> bool:
        return self is self.ACCEPTED


@dataclass(frozen=True)
class QuoteItem:
    """A single priced line of a quote.

    No field is range-checked; negative values flow into the arithmetic.
    """

    name: str = ""
    quantity: float = 0.0
    rate: float = 0.0
    discount_per_unit: float = 0.0
    tax_percent: float = 0.0

    def with_changes(self, **changes) -> "QuoteItem":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


@dataclass
class Quote:
    """The aggregate root: client details, ordered items and tax mode."""

    client_name: str = ""
    client_address: str = ""
    reference: str = ""
    items: List[QuoteItem] = field(default_factory=list)
    tax_inclusive: bool = False
    currency_code: str = DEFAULT_CURRENCY_CODE

    def copy(self) -> "Quote":
        """Return a copy that does not share the item list."""
        return replace(self, items=list(self.items))


@dataclass(frozen=True)
class CalcResult:
    """Net, tax and total for one line item."""

    net: float
    tax: float
    total: float


@dataclass(frozen=True)
class QuoteTotals:
    """Aggregated amounts across all line items of a quote."""

    subtotal_net: float = 0.0
    total_tax: float = 0.0
    grand_total: float = 0.0
