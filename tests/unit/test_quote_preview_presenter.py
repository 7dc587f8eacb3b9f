from quotebuilder.domain.quote_models import Quote, QuoteItem, QuoteStatus
from quotebuilder.presenter import QuotePreviewPresenter
from quotebuilder.services.currency_format import fallback_currency
from tests.factories import sample_quote, widget_item


def _presenter():
    # Fallback formatting keeps expectations independent of Qt locale data.
    return QuotePreviewPresenter(formatter=fallback_currency)


def test_preview_lines_are_formatted():
    preview = _presenter().build_preview(sample_quote(), QuoteStatus.SENT)

    first = preview.lines[0]
    assert first.name == "Widget"
    assert first.quantity == "2"
    assert first.rate == "100.00 INR"
    assert first.detail == "Tax: 18% | Discount: 20.00 INR"
    assert first.total == "212.40 INR"
    assert preview.status == "Sent"
    assert preview.tax_mode == "Tax exclusive"
    assert preview.client_name == "Acme Traders"


def test_preview_totals_in_display_order():
    preview = _presenter().build_preview(sample_quote())

    assert [(t.label, t.amount, t.emphasized) for t in preview.totals] == [
        ("Subtotal (Net)", "430.00 INR", False),
        ("Total Tax", "44.90 INR", False),
        ("GRAND TOTAL", "474.90 INR", True),
    ]


def test_preview_inclusive_mode_line_total_is_gross():
    quote = Quote(items=[widget_item()], tax_inclusive=True, currency_code="USD")

    preview = _presenter().build_preview(quote)

    assert preview.lines[0].total == "180.00 USD"
    assert preview.tax_mode == "Tax inclusive"
    assert preview.totals[0].amount == "152.54 USD"


def test_unnamed_line_uses_placeholder_and_fractional_quantity():
    quote = Quote(items=[QuoteItem(quantity=1.5, rate=2.0)])

    line = _presenter().build_preview(quote).lines[0]

    assert line.name == "-"
    assert line.quantity == "1.50"


def test_summary():
    summary = _presenter().build_summary(sample_quote())

    assert summary.client_name == "Acme Traders"
    assert summary.item_count == 2
    assert summary.subtotal == "430.00 INR"
    assert summary.grand_total == "474.90 INR"


def test_default_formatter_falls_back_for_unknown_currency():
    summary = QuotePreviewPresenter().build_summary(sample_quote(currency_code="XYZ"))

    assert summary.grand_total == "474.90 XYZ"
