"""
PDF export of ticket sheets
One A3 landscape page per sheet, same layout as the SVG export
"""
import base64
import io
import logging
from datetime import datetime
from typing import List, Optional
from reportlab.lib import colors
from reportlab.lib.pagesizes import A3, landscape
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ticketwise.models.sheet import Sheet, LEVEL_LABELS
from ticketwise.services import barcode
from ticketwise.services import sheet_renderer as layout

logger = logging.getLogger(__name__)

RASTER_TYPES = ("data:image/png;base64,", "data:image/jpeg;base64,", "data:image/jpg;base64,", "data:image/gif;base64,")


class PDFService:
    """Builds printable PDFs of ticket sheets"""

    def __init__(self):
        self.page_width, self.page_height = landscape(A3)

    def load_logo(self, logo: Optional[str]) -> Optional[ImageReader]:
        """
        Raster logo from a base64 data URI.
        Returns None (placeholder drawn instead) for SVG or unreadable images.
        """
        if not isinstance(logo, str) or not logo.startswith(RASTER_TYPES):
            return None
        try:
            raw = base64.b64decode(logo.split(",", 1)[1], validate=True)
            reader = ImageReader(io.BytesIO(raw))
            reader.getSize()
            return reader
        except (ValueError, OSError) as e:
            logger.warning(f"[PDF] Logo could not be decoded, using placeholder: {e}")
            return None

    def render_sheets(self, sheets: List[Sheet], logo: Optional[str] = None) -> bytes:
        """
        Generates one PDF containing every sheet, one page each.

        Args:
            sheets: Sheets to print, in page order
            logo: Ticket logo as a data URI (PNG/JPEG embedded, anything else -> placeholder)

        Returns:
            Bytes of the PDF
        """
        buffer = io.BytesIO()
        c = canvas.Canvas(buffer, pagesize=landscape(A3))
        c.setTitle("TicketWise sheets")

        image = self.load_logo(logo)
        for sheet in sheets:
            self._draw_sheet(c, sheet, image)
            c.showPage()

        c.save()
        buffer.seek(0)
        return buffer.getvalue()

    def _draw_sheet(self, c: canvas.Canvas, sheet: Sheet, image: Optional[ImageReader]):
        rows, columns = layout.grid_shape(sheet.pack_size)
        cell_w = layout.TICKET_WIDTH * mm
        cell_h = layout.TICKET_HEIGHT * mm

        origin_x = (self.page_width - columns * cell_w) / 2
        top = self.page_height - (self.page_height - rows * cell_h) / 2

        for i, code in enumerate(layout.ticket_codes(sheet)):
            row, col = layout.ticket_cell(i)
            x = origin_x + col * cell_w
            y = top - (row + 1) * cell_h
            self._draw_ticket(c, code, x, y, image)

        self._draw_guides(c, origin_x, top, rows, columns)
        self._draw_footer(c, sheet)

    def _draw_ticket(self, c: canvas.Canvas, code: str, x: float, y: float,
                     image: Optional[ImageReader]):
        """Draws one ticket with its bottom-left corner at (x, y)"""
        logo_w = layout.LOGO_WIDTH * mm
        bar_w = layout.SIDEBAR_WIDTH * mm
        cell_h = layout.TICKET_HEIGHT * mm
        barcode_h = layout.BARCODE_HEIGHT * mm

        # Logo area (above the barcode)
        logo_box = (x + 1 * mm, y + barcode_h + 1 * mm, logo_w - 2 * mm, cell_h - barcode_h - 2 * mm)
        if image is not None:
            c.drawImage(image, *logo_box, preserveAspectRatio=True, anchor='c', mask='auto')
        else:
            self._draw_placeholder(c, *logo_box)

        # Side bar with the rotated code
        c.setFillColor(colors.HexColor(layout.SIDEBAR_FILL))
        c.rect(x + logo_w, y, bar_w, cell_h, fill=True, stroke=False)
        c.saveState()
        c.translate(x + logo_w + bar_w / 2, y + cell_h / 2)
        c.rotate(90)
        c.setFillColor(colors.white)
        c.setFont("Courier-Bold", 11)
        c.drawCentredString(0, -3.5, code)
        c.restoreState()

        # Barcode (bottom of the logo area)
        strip = barcode.encode(code)
        margin = 0.5 * mm
        unit = (logo_w - 2 * margin) / strip.total_width
        c.setFillColor(colors.HexColor(layout.INK))
        for bar in strip.bars:
            c.rect(x + margin + bar.position * unit, y + margin,
                   bar.width * unit, barcode_h - 2 * margin, fill=True, stroke=False)

    def _draw_placeholder(self, c: canvas.Canvas, x: float, y: float, w: float, h: float):
        radius = min(w, h) / 2 * 0.9
        cx, cy = x + w / 2, y + h / 2
        c.setStrokeColor(colors.HexColor('#94a3b8'))
        c.setFillColor(colors.HexColor('#e2e8f0'))
        c.circle(cx, cy, radius, fill=True, stroke=True)
        c.setFillColor(colors.HexColor('#475569'))
        c.setFont("Helvetica-Bold", radius * 0.6)
        c.drawCentredString(cx, cy - radius * 0.2, "TW")

    def _draw_guides(self, c: canvas.Canvas, origin_x: float, top: float, rows: int, columns: int):
        """Dashed cut guides"""
        cell_w = layout.TICKET_WIDTH * mm
        cell_h = layout.TICKET_HEIGHT * mm
        bottom = top - rows * cell_h

        c.saveState()
        c.setStrokeColor(colors.HexColor(layout.GUIDE_STROKE))
        c.setLineWidth(layout.GUIDE_WIDTH * mm)
        c.setDash(2 * mm, 2 * mm)
        for col in range(columns + 1):
            gx = origin_x + col * cell_w
            c.line(gx, bottom, gx, top)
        for row in range(rows + 1):
            gy = top - row * cell_h
            c.line(origin_x, gy, origin_x + columns * cell_w, gy)
        c.restoreState()

    def _draw_footer(self, c: canvas.Canvas, sheet: Sheet):
        codes = layout.ticket_codes(sheet)
        c.setFillColor(colors.HexColor('#666666'))
        c.setFont("Helvetica", 8)
        c.drawCentredString(
            self.page_width / 2, 8 * mm,
            f"{LEVEL_LABELS[sheet.level]} - {codes[0]} to {codes[-1]} - "
            f"{sheet.pack_size} tickets - generated {sheet.generation_date.strftime('%d/%m/%Y')}"
        )
        c.drawRightString(self.page_width - 10 * mm, 8 * mm,
                          f"Printed {datetime.utcnow().strftime('%d/%m/%Y %H:%M')}")


# Singleton instance
pdf_service = PDFService()
