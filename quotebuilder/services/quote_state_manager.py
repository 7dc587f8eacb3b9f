"""Owner of the live quote and its draft lifecycle."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from PyQt5.QtCore import QObject, pyqtSignal

from quotebuilder.domain.quote_models import CalcResult, Quote, QuoteItem, QuoteStatus, QuoteTotals
from quotebuilder.exceptions import DraftFormatError, DraftStoreError, LineItemIndexError
from quotebuilder.infrastructure.app_constants import DRAFT_LOGGER_NAME
from quotebuilder.persistence.draft_store import DraftStore
from quotebuilder.persistence.quote_codec import dumps_quote, loads_quote
from quotebuilder.services.quote_calculator import compute_line_totals, compute_quote_totals


class QuoteStateManager(QObject):
    """Hold exactly one :class:`Quote` plus its workflow status.

    Mutations are synchronous and emit ``changed`` once the new state is in
    place. ``load_draft`` and ``save_draft`` are the only coroutines; they are
    serialized by a lock so overlapping calls run one after another.
    """

    changed = pyqtSignal()
    loading_changed = pyqtSignal(bool)
    status_changed = pyqtSignal(object)
    load_finished = pyqtSignal(bool)
    save_finished = pyqtSignal(bool)

    def __init__(
        self,
        store: DraftStore,
        *,
        quote: Optional[Quote] = None,
        logger: Optional[logging.Logger] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._logger = logger or logging.getLogger(DRAFT_LOGGER_NAME)
        self._quote = self._with_minimum_items(quote.copy() if quote is not None else Quote())
        self._status = QuoteStatus.DRAFT
        self._is_loading = False
        self._is_saving = False
        self._io_lock: Optional[asyncio.Lock] = None

    @classmethod
    async def create(
        cls,
        store: DraftStore,
        *,
        quote: Optional[Quote] = None,
        logger: Optional[logging.Logger] = None,
        parent: Optional[QObject] = None,
    ) -> "QuoteStateManager":
        """Construct a manager and restore the stored draft before returning."""
        manager = cls(store, quote=quote, logger=logger, parent=parent)
        await manager.load_draft()
        return manager

    def start(self) -> "asyncio.Task[bool]":
        """Schedule the startup load on the running event loop."""
        return asyncio.ensure_future(self.load_draft())

    # ------------------------------------------------------------------ #
    # Read access
    # ------------------------------------------------------------------ #
    @property
    def quote(self) -> Quote:
        return self._quote

    @property
    def items(self) -> Sequence[QuoteItem]:
        return tuple(self._quote.items)

    @property
    def status(self) -> QuoteStatus:
        return self._status

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_saving(self) -> bool:
        return self._is_saving

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #
    def set_client_info(
        self,
        name: Optional[str] = None,
        address: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> None:
        """Update only the client fields that were supplied."""
        if name is not None:
            self._quote.client_name = name
        if address is not None:
            self._quote.client_address = address
        if reference is not None:
            self._quote.reference = reference
        self.changed.emit()

    def toggle_tax_inclusive(self, value: bool) -> None:
        """Switch tax mode; stored rates are reinterpreted, not converted."""
        self._quote.tax_inclusive = bool(value)
        self.changed.emit()

    def add_item(self) -> None:
        self._quote.items = [*self._quote.items, QuoteItem()]
        self.changed.emit()

    def remove_item(self, index: int) -> None:
        """Remove the item at ``index``; the last remaining item is kept."""
        if len(self._quote.items) <= 1:
            return
        self._check_index(index)
        items = list(self._quote.items)
        del items[index]
        self._quote.items = items
        self.changed.emit()

    def update_item(self, index: int, item: QuoteItem) -> None:
        """Replace the item at ``index`` wholesale."""
        if not isinstance(item, QuoteItem):
            raise TypeError(f"Unsupported item type: {type(item)!r}")
        self._check_index(index)
        items = list(self._quote.items)
        items[index] = item
        self._quote.items = items
        self.changed.emit()

    def set_status(self, status: QuoteStatus) -> None:
        self._status = QuoteStatus(status)
        self.status_changed.emit(self._status)
        self.changed.emit()

    def mark_sent(self) -> None:
        """Record that the quote has been sent to the client."""
        self.set_status(QuoteStatus.SENT)

    # ------------------------------------------------------------------ #
    # Derived values
    # ------------------------------------------------------------------ #
    def line_totals(self, index: int) -> CalcResult:
        self._check_index(index)
        return compute_line_totals(self._quote.items[index], self._quote.tax_inclusive)

    def totals(self) -> QuoteTotals:
        """Compute all aggregates from the current items."""
        return compute_quote_totals(self._quote.items, self._quote.tax_inclusive)

    @property
    def subtotal_net(self) -> float:
        return self.totals().subtotal_net

    @property
    def total_tax(self) -> float:
        return self.totals().total_tax

    @property
    def grand_total(self) -> float:
        return self.totals().grand_total

    # ------------------------------------------------------------------ #
    # Draft lifecycle
    # ------------------------------------------------------------------ #
    async def load_draft(self) -> bool:
        """Restore the stored draft; returns True when the quote was replaced.

        An empty slot, an unreadable store or a malformed blob keeps the
        current quote. Those failures are logged, never raised.
        """
        async with self._lock():
            self._set_loading(True)
            restored = False
            try:
                blob = await self._store.load()
                if blob:
                    self._quote = self._with_minimum_items(loads_quote(blob))
                    self._status = QuoteStatus.DRAFT
                    restored = True
                    self._logger.info(
                        "Quote draft loaded (%d items)", len(self._quote.items)
                    )
                else:
                    self._logger.debug("No stored quote draft; keeping current quote")
            except DraftFormatError as exc:
                self._logger.warning("Stored quote draft is malformed: %s", exc)
            except (DraftStoreError, OSError) as exc:
                self._logger.error("Failed to read quote draft: %s", exc, exc_info=True)
            except Exception as exc:
                # Third-party stores may raise anything; startup must survive it.
                self._logger.error("Unexpected error loading quote draft: %s", exc, exc_info=True)
            finally:
                self._set_loading(False)
                if restored:
                    self.status_changed.emit(self._status)
                self.load_finished.emit(restored)
            return restored

    async def save_draft(self) -> bool:
        """Persist the current quote; returns True on success.

        A successful save always returns the status to DRAFT. On failure the
        state is left unchanged and ``save_finished(False)`` is emitted.
        """
        async with self._lock():
            self._is_saving = True
            self.changed.emit()
            saved = False
            try:
                blob = dumps_quote(self._quote)
                await self._store.save(blob)
                saved = True
                self._status = QuoteStatus.DRAFT
                self._logger.info("Quote draft saved (%d items)", len(self._quote.items))
            except (DraftStoreError, OSError, TypeError, ValueError) as exc:
                self._logger.error("Failed to save quote draft: %s", exc, exc_info=True)
            finally:
                self._is_saving = False
                if saved:
                    self.status_changed.emit(self._status)
                self.changed.emit()
                self.save_finished.emit(saved)
            return saved

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _lock(self) -> asyncio.Lock:
        # Created lazily so the lock binds to the loop that first runs I/O.
        if self._io_lock is None:
            self._io_lock = asyncio.Lock()
        return self._io_lock

    def _set_loading(self, value: bool) -> None:
        self._is_loading = value
        self.loading_changed.emit(value)
        self.changed.emit()

    def _check_index(self, index: int) -> None:
        count = len(self._quote.items)
        if not 0 <= index < count:
            raise LineItemIndexError(f"Item index {index} out of range for {count} items")

    @staticmethod
    def _with_minimum_items(quote: Quote) -> Quote:
        if not quote.items:
            quote.items = [QuoteItem()]
        return quote
