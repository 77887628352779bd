"""
angebot/web/document.py
Angebots-PDF mit reportlab, lokal gerendert.
"""
from __future__ import annotations

from datetime import date
from io import BytesIO
from typing import TYPE_CHECKING
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from angebot.domain.formatting import format_amount, format_eur, format_quantity
from angebot.domain.models import DiscountBase, DiscountType, PositionType
from angebot.domain.pricing import compute_totals, row_values

if TYPE_CHECKING:
    from angebot.domain.draft import Draft


def _german_date(iso: str) -> str:
    try:
        return date.fromisoformat(iso).strftime("%d.%m.%Y")
    except (TypeError, ValueError):
        return iso or ""


def _text(value: str) -> str:
    return escape(value or "").replace("\n", "<br/>")


class OfferDocument:
    def __init__(self, company_name: str = "KUKANILEA Handwerksservice"):
        self.company_name = company_name
        self.styles = getSampleStyleSheet()

    def _position_table(self, draft: "Draft") -> Table:
        styles = self.styles
        data: list[list] = [["Pos", "Bezeichnung", "Menge", "Einzelpreis", "Gesamt"]]
        commands = [
            ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
            ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]
        pos_no = 0
        for row_idx, (p, value) in enumerate(zip(draft.positions, row_values(draft.positions)), start=1):
            if p.type is PositionType.ITEM:
                pos_no += 1
                unit = f" {p.unit}" if p.unit else ""
                data.append([
                    str(pos_no),
                    Paragraph(_text(p.description), styles["Normal"]),
                    f"{format_quantity(p.quantity or 0)}{unit}",
                    format_eur(p.unit_price or 0),
                    format_eur(value),
                ])
                commands.append(("LINEBELOW", (0, row_idx), (-1, row_idx), 0.25, colors.lightgrey))
            elif p.type is PositionType.HEADING:
                data.append(["", Paragraph(f"<b>{_text(p.description)}</b>", styles["Normal"]), "", "", ""])
                commands.append(("SPAN", (1, row_idx), (-1, row_idx)))
            elif p.type is PositionType.DESCRIPTION:
                data.append(["", Paragraph(f"<i>{_text(p.description)}</i>", styles["Normal"]), "", "", ""])
                commands.append(("SPAN", (1, row_idx), (-1, row_idx)))
            elif p.type is PositionType.SUBTOTAL:
                data.append(["", "", "", p.description or "Zwischensumme", format_eur(value)])
                commands.append(("FONTNAME", (3, row_idx), (-1, row_idx), "Helvetica-Bold"))
                commands.append(("LINEABOVE", (3, row_idx), (-1, row_idx), 0.5, colors.black))
            else:
                data.append(["", "", "", "", ""])
                commands.append(("LINEBELOW", (0, row_idx), (-1, row_idx), 0.5, colors.grey))

        table = Table(data, colWidths=[1 * cm, 8 * cm, 2.5 * cm, 3 * cm, 3 * cm], repeatRows=1)
        table.setStyle(TableStyle(commands))
        return table

    def _totals_table(self, draft: "Draft") -> Table:
        totals = compute_totals(draft.positions, draft.tax_rate, draft.discount)
        d = draft.discount
        rows: list[list[str]] = [["Summe Netto:", format_eur(totals.net)]]
        if totals.discount_amount > 0:
            pct = f" ({format_amount(d.value)} %)" if d.type is DiscountType.PERCENT else ""
            base = "vom Brutto" if d.base is DiscountBase.GROSS else "vom Netto"
            rows.append([f"{d.label}{pct} {base}:", f"- {format_eur(totals.discount_amount)}"])
            rows.append(["Netto nach Rabatt:", format_eur(totals.taxable_base)])
        rows.append([f"USt ({format_quantity(draft.tax_rate)} %):", format_eur(totals.tax)])
        rows.append(["Gesamt Brutto:", format_eur(totals.gross)])

        table = Table(rows, colWidths=[12.5 * cm, 5 * cm])
        table.setStyle(TableStyle([
            ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ("LINEABOVE", (0, -1), (-1, -1), 1, colors.black),
            ("BACKGROUND", (0, -1), (-1, -1), colors.lightgrey),
        ]))
        return table

    def render(self, draft: "Draft") -> bytes:
        buf = BytesIO()
        doc = SimpleDocTemplate(
            buf,
            pagesize=A4,
            title=draft.title or "Angebot",
            author=self.company_name,
        )
        styles = self.styles
        story = []

        # Header
        story.append(Paragraph(escape(self.company_name.upper()), styles["Title"]))
        story.append(Spacer(1, 1 * cm))

        # Kundendaten
        lines = draft.customer.address_lines if draft.customer else []
        story.append(Paragraph("<br/>".join(escape(line) for line in lines) or "&nbsp;", styles["Normal"]))
        story.append(Spacer(1, 1 * cm))

        # Angebotsinfo
        story.append(Paragraph(f"<b>Angebot Nr: {escape(draft.offer_number or 'ENTWURF')}</b>", styles["Heading2"]))
        if draft.date:
            story.append(Paragraph(f"Datum: {_german_date(draft.date)}", styles["Normal"]))
        if draft.valid_until:
            story.append(Paragraph(f"Gültig bis: {_german_date(draft.valid_until)}", styles["Normal"]))
        if draft.customer and draft.customer.customer_number:
            story.append(Paragraph(f"Kundennummer: {escape(draft.customer.customer_number)}", styles["Normal"]))
        story.append(Spacer(1, 0.5 * cm))

        if draft.title:
            story.append(Paragraph(_text(draft.title), styles["Heading3"]))
        if draft.intro:
            story.append(Paragraph(_text(draft.intro), styles["Normal"]))
            story.append(Spacer(1, 0.5 * cm))

        story.append(self._position_table(draft))
        story.append(Spacer(1, 0.5 * cm))
        story.append(self._totals_table(draft))

        story.append(Spacer(1, 2 * cm))
        story.append(Paragraph("Vielen Dank für Ihre Anfrage. Wir freuen uns auf eine Zusammenarbeit.", styles["Italic"]))

        doc.build(story)
        return buf.getvalue()
