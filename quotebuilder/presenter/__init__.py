"""Presenter layer modules."""

from .quote_preview_presenter import (
    PreviewLine,
    PreviewTotalLine,
    QuotePreview,
    QuotePreviewPresenter,
    QuoteSummary,
)

__all__ = [
    "PreviewLine",
    "PreviewTotalLine",
    "QuotePreview",
    "QuotePreviewPresenter",
    "QuoteSummary",
]
