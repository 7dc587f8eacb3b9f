from .quote_items import (
    quote_items,
    quotes,
    sample_quote,
    service_item,
    widget_item,
)

__all__ = [
    "quote_items",
    "quotes",
    "sample_quote",
    "service_item",
    "widget_item",
]
