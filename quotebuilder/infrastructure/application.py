"""Session bootstrap for the quote builder."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from quotebuilder.domain.quote_models import Quote
from quotebuilder.infrastructure.app_constants import APP_TITLE, DRAFT_LOGGER_NAME
from quotebuilder.infrastructure.logger import configure_logging
from quotebuilder.persistence.draft_store import DraftStore, build_draft_store
from quotebuilder.presenter import QuotePreviewPresenter
from quotebuilder.services.quote_state_manager import QuoteStateManager
from quotebuilder.services.settings_service import SettingsService


@dataclass
class QuoteSession:
    """Aggregate of the objects owned for one editing session.

    Consumers receive this context explicitly instead of reaching for globals.
    """

    settings: SettingsService
    store: DraftStore
    manager: QuoteStateManager
    presenter: QuotePreviewPresenter
    logger: logging.Logger

    async def shutdown(self, *, save: bool = True) -> bool:
        """Optionally persist the draft before the session is discarded."""
        if not save:
            return True
        return await self.manager.save_draft()


def new_quote_from_settings(settings: SettingsService) -> Quote:
    """Seed a blank quote with the configured defaults."""
    return Quote(
        currency_code=settings.load_default_currency(),
        tax_inclusive=settings.load_tax_inclusive_default(),
    )


async def open_session(
    *,
    settings: Optional[SettingsService] = None,
    store: Optional[DraftStore] = None,
    passphrase: Optional[str] = None,
    setup_logging: bool = False,
    logging_setup: Callable[..., Any] = configure_logging,
    logger: Optional[logging.Logger] = None,
) -> QuoteSession:
    """Build settings, store and manager, then restore the stored draft."""
    settings = settings or SettingsService()
    if setup_logging:
        logging_setup(settings.raw())
    # An injected logger replaces the draft lifecycle logger too.
    draft_logger = logger or logging.getLogger(DRAFT_LOGGER_NAME)
    logger = logger or logging.getLogger("quotebuilder")

    if store is None:
        store = build_draft_store(settings, passphrase=passphrase, logger=draft_logger)

    manager = await QuoteStateManager.create(
        store,
        quote=new_quote_from_settings(settings),
        logger=draft_logger,
    )
    logger.info(
        "%s session ready (status=%s, items=%d)",
        APP_TITLE,
        manager.status.value,
        len(manager.items),
    )
    return QuoteSession(
        settings=settings,
        store=store,
        manager=manager,
        presenter=QuotePreviewPresenter(),
        logger=logger,
    )
