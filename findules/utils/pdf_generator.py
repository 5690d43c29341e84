from datetime import datetime

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from findules.config import settings

# A5 portrait: 148mm x 210mm
PAGE_WIDTH = 148
MARGIN = 15


class FuelCouponPDF(FPDF):
    def __init__(self):
        super().__init__(orientation="P", unit="mm", format="A5")
        self.set_margins(MARGIN, MARGIN, MARGIN)

    def header(self):
        self.set_font("helvetica", "B", 16)
        self.set_text_color(33, 37, 41)
        self.cell(0, 8, "FUEL AUTHORIZATION COUPON", align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        self.set_font("helvetica", "", 9)
        self.set_text_color(108, 117, 125)
        self.cell(0, 5, "Findules Financial Operations", align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(4)

    def footer(self):
        self.set_y(-15)
        self.set_font("helvetica", "I", 8)
        self.set_text_color(128)
        self.cell(0, 10, f"Generated {datetime.now():%d/%m/%Y %H:%M} - Page {self.page_no()}", align="C")

    def field(self, label: str, value) -> None:
        self.set_font("helvetica", "B", 10)
        self.cell(40, 7, f"{label}:")
        self.set_font("helvetica", "", 10)
        self.cell(0, 7, _latin1(value), new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def _latin1(value) -> str:
    # Core PDF fonts only cover latin-1
    text = "" if value is None else str(value)
    return text.encode("latin-1", "replace").decode("latin-1")


def _enum_text(value) -> str:
    return getattr(value, "value", value) or ""


def generate_fuel_coupon_pdf(coupon) -> bytes:
    pdf = FuelCouponPDF()
    pdf.add_page()
    pdf.set_auto_page_break(auto=True, margin=15)

    # --- DOCUMENT CODE ---
    pdf.set_font("helvetica", "B", 11)
    pdf.set_text_color(0, 0, 0)
    pdf.cell(0, 8, f"Document Code: {coupon.document_code}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_line_width(0.5)
    pdf.line(MARGIN, pdf.get_y() + 1, PAGE_WIDTH - MARGIN, pdf.get_y() + 1)
    pdf.ln(5)

    # --- DETAILS ---
    pdf.field("Date", coupon.date.strftime("%d/%m/%Y") if coupon.date else "")
    pdf.field("Staff Name", coupon.staff_name)
    pdf.field("Department", coupon.department)
    pdf.field("Unit", coupon.unit or "-")
    pdf.field("Vehicle Type", coupon.vehicle_type or "-")
    pdf.field("Plate Number", coupon.plate_number or "-")
    pdf.field("Fuel Type", _enum_text(coupon.fuel_type))
    pdf.field("Quantity", f"{coupon.quantity_litres:,.2f} litres")
    pdf.field("Est. Amount", f"{settings.currency_code} {(coupon.estimated_amount or 0):,.2f}")
    pdf.field("Branch", coupon.branch_name or "-")

    # --- PURPOSE ---
    pdf.ln(2)
    pdf.set_font("helvetica", "B", 10)
    pdf.cell(0, 7, "Purpose:", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("helvetica", "", 10)
    pdf.multi_cell(0, 5, _latin1(coupon.purpose or "-"))

    # --- SIGNATURES ---
    pdf.ln(12)
    y = pdf.get_y()
    pdf.line(MARGIN, y, MARGIN + 50, y)
    pdf.line(PAGE_WIDTH - MARGIN - 50, y, PAGE_WIDTH - MARGIN, y)
    pdf.set_font("helvetica", "", 8)
    pdf.cell(59, 5, f"Issued by: {_latin1(coupon.creator_name or '')}")
    pdf.cell(0, 5, "Authorized signature", align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    return bytes(pdf.output())
