"""
=============================================================================
PAGE AND EXPORT RENDERING
=============================================================================

Produces the HTML pages and the CSV export from item snapshots.

Pages are filled from the HTML templates in costtracker/templates/ by
plain placeholder substitution:

    templates/index.html   {{items_rows}}  {{total_cost}}
    templates/edit.html    {{item_index}}  {{item_name}}
                           {{item_quantity}}  {{item_cost}}

Every user-supplied string is HTML-escaped before substitution.

=============================================================================
NUMBER FORMATS
=============================================================================

    Listing (grouped)      1234.5      → 1,234.50
                           1234567.891 → 1'234,567.89
                           (first mark is an apostrophe once there are
                            three or more digit groups)

    Edit form and CSV      1234567.891 → 1234567.89

The grouped format matches what static/formatter.js produces while the
user types, so a cost looks the same on the way in and on the way out.

=============================================================================
"""

import csv
import html
import io
import logging
from pathlib import Path
from typing import Iterable, Optional

from .store import Item

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

CSV_HEADER = ["Nombre", "Cantidad", "Costo Unitario", "Total"]


class TemplateError(Exception):
    """Raised when a page template cannot be read."""


def format_currency(value: float) -> str:
    """
    Plain two-decimal formatting.

        >>> format_currency(3.14159)
        '3.14'
    """
    return f"{value:.2f}"


def format_currency_grouped(value: float) -> str:
    """
    Two decimals with digit grouping.

        >>> format_currency_grouped(999.5)
        '999.50'
        >>> format_currency_grouped(12345.678)
        '12,345.68'
        >>> format_currency_grouped(1234567)
        "1'234,567.00"
    """
    number = format_currency(value)
    sign = "-" if number.startswith("-") else ""
    integer_part, _, decimal_part = number.lstrip("-").partition(".")

    groups = []
    for end in range(len(integer_part), 0, -3):
        groups.insert(0, integer_part[max(end - 3, 0):end])
    if not groups:
        groups = ["0"]

    grouped = groups[0]
    for position, group in enumerate(groups[1:], start=1):
        separator = "'" if position == 1 and len(groups) > 2 else ","
        grouped += separator + group

    return f"{sign}{grouped}.{decimal_part}"


def load_template(name: str, template_dir: Optional[Path] = None) -> str:
    """
    Read a page template.

    Raises:
        TemplateError: If the file is missing or unreadable.
    """
    path = (template_dir or TEMPLATE_DIR) / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Cannot read template {path}: {e}")
        raise TemplateError(f"No se pudo abrir la plantilla: {name}") from e


def fill_template(template: str, values: dict[str, str]) -> str:
    """Replace every {{key}} in the template with its value."""
    for key, value in values.items():
        template = template.replace("{{" + key + "}}", value)
    return template


def render_error_page(message: str) -> str:
    """
    Minimal HTML page used for internal errors.

        >>> render_error_page("<boom>")
        '<html><body><h1>Error interno</h1><p>&lt;boom&gt;</p></body></html>'
    """
    return f"<html><body><h1>Error interno</h1><p>{html.escape(message)}</p></body></html>"


def _render_row(index: int, item: Item) -> str:
    # Position shown from 1, form carries the 0-based index
    return (
        f'      <tr><td>{index + 1}</td><td>{html.escape(item.name)}</td>'
        f'<td>{item.quantity}</td>'
        f'<td>{format_currency_grouped(item.unit_cost)}</td>'
        f'<td>{format_currency_grouped(item.total_cost)}</td>'
        f'<td class="actions"><form class="action-form" method="GET" action="/edit">'
        f'<input type="hidden" name="index" value="{index}">'
        f'<button class="action-button" type="submit">Editar</button></form></td></tr>\n'
    )


def render_listing(items: Iterable[Item], template_dir: Optional[Path] = None) -> str:
    """
    Render the main page: the add form, the item table and the total.

    If the template cannot be loaded the error page is returned instead.
    """
    items = list(items)
    rows = "".join(_render_row(index, item) for index, item in enumerate(items))
    total = sum(item.total_cost for item in items)

    try:
        page = load_template("index.html", template_dir)
    except TemplateError as e:
        return render_error_page(str(e))

    return fill_template(page, {
        "items_rows": rows,
        "total_cost": format_currency_grouped(total),
    })


def render_edit_page(index: int, item: Item, template_dir: Optional[Path] = None) -> str:
    """Render the edit form pre-filled with one item."""
    try:
        page = load_template("edit.html", template_dir)
    except TemplateError as e:
        return render_error_page(str(e))

    return fill_template(page, {
        "item_index": str(index),
        "item_name": html.escape(item.name),
        "item_quantity": str(item.quantity),
        "item_cost": format_currency(item.unit_cost),
    })


def render_csv(items: Iterable[Item]) -> str:
    """
    Render the CSV export.

        Nombre,Cantidad,Costo Unitario,Total
        "Tornillo",10,"0.25","2.50"
        "Total","","","2.50"

    Lines end with CRLF. Text fields are quoted (embedded quotes doubled),
    quantities are bare integers.
    """
    output = io.StringIO()

    header = csv.writer(output, lineterminator="\r\n")
    header.writerow(CSV_HEADER)

    rows = csv.writer(output, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\r\n")
    total = 0.0
    for item in items:
        rows.writerow([
            item.name,
            item.quantity,
            format_currency(item.unit_cost),
            format_currency(item.total_cost),
        ])
        total += item.total_cost

    rows.writerow(["Total", "", "", format_currency(total)])

    return output.getvalue()
