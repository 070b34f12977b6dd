"""
Ticket sheet rendering (SVG)

One sheet = one A3 landscape page holding pack_size tickets in a grid of
8 columns. Every ticket shows the logo, a dark side bar with the rotated
ticket code and, for printable exports, the Code39 barcode of that code.
Units are millimetres.
"""
import base64
import math
from html import escape
from typing import List, Optional, Tuple
from urllib.parse import quote

from ticketwise.core.ticket_codes import format_ticket_code
from ticketwise.models.sheet import Sheet
from ticketwise.services import barcode

# Page (A3 landscape)
PAGE_WIDTH = 420
PAGE_HEIGHT = 297

# Ticket cell
TICKET_WIDTH = 40
TICKET_HEIGHT = 50
COLUMNS = 8

LOGO_WIDTH = TICKET_WIDTH * 0.75
SIDEBAR_WIDTH = TICKET_WIDTH - LOGO_WIDTH
BARCODE_HEIGHT = TICKET_HEIGHT * 0.15

# Cut guides
GUIDE_STROKE = "#cccccc"
GUIDE_WIDTH = 0.5
GUIDE_DASH = "2 2"

SIDEBAR_FILL = "#1e293b"
INK = "#111827"
FONT_FAMILY = "ui-monospace, Menlo, Consolas, 'Liberation Mono', 'Courier New', monospace"

_PLACEHOLDER_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">'
    '<circle cx="50" cy="50" r="46" fill="#e2e8f0" stroke="#94a3b8" stroke-width="4"/>'
    '<text x="50" y="50" text-anchor="middle" dominant-baseline="central" '
    'font-family="sans-serif" font-size="30" font-weight="bold" fill="#475569">TW</text>'
    '</svg>'
)
PLACEHOLDER_LOGO = "data:image/svg+xml;utf8," + quote(_PLACEHOLDER_SVG)


def is_valid_logo(logo: Optional[str]) -> bool:
    """
    True for a data:image/ URI with a payload. Base64 payloads must also
    decode.
    """
    if not isinstance(logo, str) or not logo.startswith("data:image/"):
        return False
    header, sep, payload = logo.partition(",")
    if not sep or not payload.strip():
        return False
    if header.endswith(";base64"):
        try:
            base64.b64decode(payload, validate=True)
        except ValueError:
            return False
    return True


def resolve_logo(logo: Optional[str]) -> str:
    """The logo data URI if usable, otherwise the built-in placeholder"""
    return logo if is_valid_logo(logo) else PLACEHOLDER_LOGO


def grid_shape(pack_size: int) -> Tuple[int, int]:
    """(rows, columns) of the ticket grid"""
    return math.ceil(pack_size / COLUMNS), COLUMNS


def ticket_cell(index: int) -> Tuple[int, int]:
    """(row, column) of the ticket at `index`"""
    return index // COLUMNS, index % COLUMNS


def ticket_codes(sheet: Sheet) -> List[str]:
    """
    Codes printed on the sheet, in grid order.

    start_number + i never exceeds 9999: the allocator refuses any range
    that would go past it, so no wrap-around is needed.
    """
    return [
        format_ticket_code(sheet.level, sheet.generation_date.year, sheet.start_number + i)
        for i in range(sheet.pack_size)
    ]


def sheet_filename(sheet: Sheet) -> str:
    return f"sheet-{sheet.level.value}-{sheet.start_number}.svg"


def _ticket_svg(code: str, x: float, y: float, logo_href: str, with_barcode: bool) -> str:
    logo_height = TICKET_HEIGHT - BARCODE_HEIGHT if with_barcode else TICKET_HEIGHT
    bar_cx = LOGO_WIDTH + SIDEBAR_WIDTH / 2
    bar_cy = TICKET_HEIGHT / 2

    parts = [
        f'<g transform="translate({x}, {y})">',
        f'<rect width="{TICKET_WIDTH}" height="{TICKET_HEIGHT}" fill="white" />',
        f'<image href="{logo_href}" x="1" y="1" width="{LOGO_WIDTH - 2}" height="{logo_height - 2}" '
        f'preserveAspectRatio="xMidYMid meet" />',
        f'<rect x="{LOGO_WIDTH}" y="0" width="{SIDEBAR_WIDTH}" height="{TICKET_HEIGHT}" fill="{SIDEBAR_FILL}" />',
        f'<text x="{bar_cx}" y="{bar_cy}" transform="rotate(-90, {bar_cx}, {bar_cy})" '
        f'fill="white" font-family="{escape(FONT_FAMILY)}" font-size="4" font-weight="bold" '
        f'text-anchor="middle" dominant-baseline="central" letter-spacing="0.5">{escape(code)}</text>',
    ]
    if with_barcode:
        parts.append(barcode.to_svg_rects(code, 0, logo_height, LOGO_WIDTH, BARCODE_HEIGHT, fill=INK))
    parts.append("</g>")
    return "".join(parts)


def _guides_svg(rows: int, columns: int) -> str:
    """Dashed cut guides, one line per grid edge so dashes never overlap"""
    grid_w = columns * TICKET_WIDTH
    grid_h = rows * TICKET_HEIGHT
    style = (
        f'stroke="{GUIDE_STROKE}" stroke-width="{GUIDE_WIDTH}" '
        f'stroke-dasharray="{GUIDE_DASH}" stroke-linecap="butt"'
    )
    lines = [
        f'<line x1="{c * TICKET_WIDTH}" y1="0" x2="{c * TICKET_WIDTH}" y2="{grid_h}" {style} />'
        for c in range(columns + 1)
    ]
    lines += [
        f'<line x1="0" y1="{r * TICKET_HEIGHT}" x2="{grid_w}" y2="{r * TICKET_HEIGHT}" {style} />'
        for r in range(rows + 1)
    ]
    return "".join(lines)


def render_sheet_svg(sheet: Sheet, logo: Optional[str] = None, with_barcode: bool = True) -> str:
    """
    Self-contained SVG document for one sheet.

    Args:
        sheet: Sheet to render
        logo: Logo as a data:image/ URI; anything else uses the placeholder
        with_barcode: Draw the Code39 barcode under each logo

    Returns:
        SVG document as a string
    """
    logo_href = escape(resolve_logo(logo), quote=True)
    rows, columns = grid_shape(sheet.pack_size)

    margin_left = (PAGE_WIDTH - columns * TICKET_WIDTH) / 2
    margin_top = (PAGE_HEIGHT - rows * TICKET_HEIGHT) / 2

    tickets = []
    for i, code in enumerate(ticket_codes(sheet)):
        row, col = ticket_cell(i)
        tickets.append(_ticket_svg(code, col * TICKET_WIDTH, row * TICKET_HEIGHT, logo_href, with_barcode))

    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<svg width="{PAGE_WIDTH}mm" height="{PAGE_HEIGHT}mm" viewBox="0 0 {PAGE_WIDTH} {PAGE_HEIGHT}" '
        'xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink">'
        '<rect width="100%" height="100%" fill="white" />'
        f'<g transform="translate({margin_left}, {margin_top})">'
        f'{"".join(tickets)}'
        f'{_guides_svg(rows, columns)}'
        '</g>'
        '</svg>\n'
    )
