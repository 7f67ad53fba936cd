from fpdf import FPDF
import logging
from utils.formatting import rupees_in_words, to_money

logger = logging.getLogger(__name__)

class ReceiptPDF(FPDF):
    def __init__(self, temple: dict):
        super().__init__()
        self.temple = temple

    def header(self):
        self.set_font('Arial', 'B', 16)
        self.cell(0, 10, self.temple.get("name") or "", 0, 1, 'C')
        self.set_font('Arial', '', 10)
        if self.temple.get("address"):
            self.multi_cell(0, 5, self.temple["address"], 0, 'C')
        contact = "  |  ".join(v for v in [self.temple.get("phone"), self.temple.get("email")] if v)
        if contact:
            self.cell(0, 6, contact, 0, 1, 'C')
        self.ln(4)
        self.set_font('Arial', 'B', 13)
        self.cell(0, 10, 'DONATION RECEIPT', 'TB', 1, 'C')
        self.ln(6)

    def footer(self):
        self.set_y(-20)
        self.set_font('Arial', 'I', 9)
        if self.temple.get("footer"):
            self.cell(0, 6, self.temple["footer"], 0, 1, 'C')
        self.cell(0, 6, 'This is a computer generated receipt.', 0, 0, 'C')


def _row(pdf: FPDF, label: str, value):
    pdf.set_font('Arial', 'B', 11)
    pdf.cell(55, 8, label, 0, 0, 'L')
    pdf.set_font('Arial', '', 11)
    pdf.multi_cell(0, 8, str(value) if value not in (None, "") else "-", 0, 'L')


def generate_donation_receipt(donation, temple: dict) -> bytes:
    """
    Render a donation receipt.

    Args:
        donation: Donation row; devotee and category relationships are read if set.
        temple: Temple profile from crud.app_config.get_temple_profile.

    Returns:
        The PDF document as bytes.
    """
    pdf = ReceiptPDF(temple)
    pdf.add_page()

    donor = donation.devotee.full_name if donation.devotee else donation.donor_name
    amount = to_money(donation.amount)

    _row(pdf, 'Receipt No:', donation.receipt_number)
    _row(pdf, 'Date:', donation.donation_date.strftime("%d-%m-%Y"))
    _row(pdf, 'Received from:', donor or "Anonymous")
    if donation.devotee:
        _row(pdf, 'Devotee Code:', donation.devotee.devotee_code)
    if donation.category:
        _row(pdf, 'Category:', donation.category.name)
    if donation.purpose:
        _row(pdf, 'Purpose:', donation.purpose)
    _row(pdf, 'Payment Mode:', donation.payment_mode)
    if donation.transaction_reference:
        _row(pdf, 'Reference:', donation.transaction_reference)
    pdf.ln(4)

    # Core fonts are latin-1 only, so no rupee sign here
    _row(pdf, 'Amount:', f"Rs. {amount:,.2f}")
    _row(pdf, 'Amount in words:', rupees_in_words(amount))

    if donation.is_80g_eligible:
        pdf.ln(6)
        pdf.set_font('Arial', 'B', 10)
        pdf.cell(0, 6, 'Eligible for deduction under Section 80G of the Income Tax Act, 1961', 0, 1, 'L')
        pdf.set_font('Arial', '', 10)
        if temple.get("registration_80g"):
            pdf.cell(0, 6, f"80G Registration No: {temple['registration_80g']}", 0, 1, 'L')
        if temple.get("pan"):
            pdf.cell(0, 6, f"Temple PAN: {temple['pan']}", 0, 1, 'L')
        if donation.pan_number:
            pdf.cell(0, 6, f"Donor PAN: {donation.pan_number}", 0, 1, 'L')

    pdf.ln(16)
    pdf.set_font('Arial', '', 11)
    pdf.cell(0, 8, 'Authorised Signatory', 0, 1, 'R')

    logger.debug(f"Rendered receipt {donation.receipt_number}")
    return bytes(pdf.output())
