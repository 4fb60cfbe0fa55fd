"""Invoice and report rendering, plus the users CSV export."""
import csv
import io
from datetime import date, datetime
from types import SimpleNamespace

import pytest

from medibot.services.report_service import (
    PAGE_BREAK, ReportRenderError, export_users_csv, invoice_filename, paginate,
    render_invoice, render_pharmacy_report, report_filename,
)

PHARMACY = SimpleNamespace(id=1, name="Nyabugogo Pharmacy", location="Nyabugogo", phone="+250780000000", email=None)


def _sale(sale_id=42, **overrides):
    values = dict(
        id=sale_id, invoice_number=str(sale_id).zfill(6), created_at=datetime(2026, 3, 14, 10, 5),
        customer_name=None, customer_phone=None, medicine_name="Paracetamol 500mg",
        quantity=3, unit_price=1250.0, total_amount=3750.0,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_paginate_splits_on_form_feed():
    lines = [f"line {i}" for i in range(7)]
    text = paginate(lines, per_page=3)
    pages = text.rstrip("\n").split(PAGE_BREAK)
    assert len(pages) == 3
    assert pages[-1] == "line 6"


def test_paginate_empty_and_invalid():
    assert paginate([], per_page=10) == "\n"
    with pytest.raises(ValueError):
        paginate(["x"], per_page=-1)


def test_filenames():
    assert invoice_filename(_sale(123)) == "invoice-000123.txt"
    assert report_filename(date(2026, 1, 2)) == "pharmacy-reports-2026-01-02.txt"


def test_invoice_defaults_to_walk_in_customer():
    text = render_invoice(_sale(), PHARMACY)
    assert "INVOICE #000042" in text
    assert "Walk-in customer" in text
    assert "3,750.00" in text
    assert "Phone:" not in text


def test_invoice_with_broken_sale_raises_render_error():
    with pytest.raises(ReportRenderError):
        render_invoice(_sale(created_at=None), PHARMACY)


def test_pharmacy_report_lists_inventory_and_sales():
    medicines = [SimpleNamespace(name="Paracetamol 500mg", price=1250.0, stock=40)]
    stats = {
        "total_medicines": 1, "inventory_value": 50000.0, "low_stock_count": 0,
        "stock_distribution": {"low": 0, "medium": 0, "high": 1},
        "total_sales": 1, "sales_amount": 3750.0,
    }
    text = render_pharmacy_report(PHARMACY, medicines, [_sale()], stats, day=date(2026, 3, 14))
    assert "Generated: 2026-03-14" in text
    assert "50,000.00" in text
    assert "high 1" in text
    assert "000042" in text

    with pytest.raises(ReportRenderError):
        render_pharmacy_report(PHARMACY, medicines, [], {})


def test_users_csv_blanks_missing_values():
    rows = [
        {"user_id": 1, "email": "a@example.com", "role": "patient", "name": "A", "pharmacy_id": None,
         "pharmacy_name": None, "created_at": datetime(2026, 1, 1), "extra": "ignored"},
    ]
    parsed = list(csv.DictReader(io.StringIO(export_users_csv(rows))))
    assert parsed[0]["pharmacy_id"] == ""
    assert parsed[0]["email"] == "a@example.com"
    assert "extra" not in parsed[0]
