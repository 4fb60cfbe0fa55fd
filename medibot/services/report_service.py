"""Plain-text invoices and pharmacy reports, plus the users CSV export.

Documents are rendered as lines and split into pages of
``REPORT_LINES_PER_PAGE`` lines separated by form feeds.
"""
import csv
import io
import logging
from datetime import date

from medibot.core.config import settings

logger = logging.getLogger(__name__)

PAGE_BREAK = "\f"
RULE = "-" * 60

USER_EXPORT_COLUMNS = ("user_id", "email", "role", "name", "pharmacy_id", "pharmacy_name", "created_at")


class ReportRenderError(Exception):
    pass


def paginate(lines: list[str], per_page: int | None = None) -> str:
    per_page = per_page or settings.REPORT_LINES_PER_PAGE
    if per_page <= 0:
        raise ValueError("Lines per page must be positive")
    pages = ["\n".join(lines[i:i + per_page]) for i in range(0, len(lines), per_page)] or [""]
    return PAGE_BREAK.join(pages) + "\n"


def _money(value) -> str:
    return f"{float(value or 0):,.2f}"


def invoice_filename(sale) -> str:
    return f"invoice-{sale.invoice_number}.txt"


def report_filename(day: date | None = None) -> str:
    return f"pharmacy-reports-{(day or date.today()).isoformat()}.txt"


def render_invoice(sale, pharmacy) -> str:
    try:
        lines = [
            pharmacy.name,
            pharmacy.location or "",
            " | ".join(filter(None, [pharmacy.phone, pharmacy.email])),
            RULE,
            f"INVOICE #{sale.invoice_number}",
            f"Date: {sale.created_at:%Y-%m-%d %H:%M}",
            f"Customer: {sale.customer_name or 'Walk-in customer'}",
        ]
        if sale.customer_phone:
            lines.append(f"Phone: {sale.customer_phone}")
        lines += [
            RULE,
            f"{'Item':<30}{'Qty':>6}{'Unit':>12}{'Total':>12}",
            f"{(sale.medicine_name or '')[:30]:<30}{sale.quantity:>6}"
            f"{_money(sale.unit_price):>12}{_money(sale.total_amount):>12}",
            RULE,
            f"{'TOTAL':<48}{_money(sale.total_amount):>12}",
            "",
            f"Thank you for choosing {pharmacy.name}.",
        ]
    except (AttributeError, TypeError, ValueError) as e:
        logger.error("Failed to render invoice for sale %s", getattr(sale, "id", None), exc_info=e)
        raise ReportRenderError("Could not generate the invoice") from e
    return paginate(lines)


def render_pharmacy_report(pharmacy, medicines, sales, stats: dict, day: date | None = None) -> str:
    try:
        lines = [
            f"{pharmacy.name} report",
            f"Generated: {(day or date.today()).isoformat()}",
            RULE,
            "INVENTORY",
            f"Medicines: {stats['total_medicines']}",
            f"Inventory value: {_money(stats['inventory_value'])}",
            f"Low stock (<= {settings.LOW_STOCK_THRESHOLD}): {stats['low_stock_count']}",
            "Stock distribution: " + ", ".join(f"{k} {v}" for k, v in stats["stock_distribution"].items()),
            "",
            f"{'Medicine':<34}{'Price':>12}{'Stock':>8}",
        ]
        lines += [f"{m.name[:34]:<34}{_money(m.price):>12}{m.stock:>8}" for m in medicines]
        lines += [
            "",
            RULE,
            "SALES",
            f"Sales: {stats['total_sales']}  Amount: {_money(stats['sales_amount'])}",
            "",
            f"{'Invoice':<10}{'Date':<12}{'Medicine':<24}{'Qty':>5}{'Total':>12}",
        ]
        lines += [
            f"{s.invoice_number:<10}{s.created_at:%Y-%m-%d}  {(s.medicine_name or '')[:22]:<24}"
            f"{s.quantity:>5}{_money(s.total_amount):>12}"
            for s in sales
        ]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.error("Failed to render report for pharmacy %s", getattr(pharmacy, "id", None), exc_info=e)
        raise ReportRenderError("Could not generate the report") from e
    return paginate(lines)


def export_users_csv(rows: list[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=USER_EXPORT_COLUMNS, extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow({k: ("" if row.get(k) is None else row.get(k)) for k in USER_EXPORT_COLUMNS})
    return buffer.getvalue()
