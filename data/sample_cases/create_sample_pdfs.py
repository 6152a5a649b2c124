"""
Script to generate sample claim PDFs for each submitter role.
Creates claimant, dealer and service center claim forms that the
/extract-pdf endpoint can classify and extract.
"""

from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
import os


def _build_claim_pdf(path, section_label, party_rows, claim_rows, notes):
    """Render a one-page claim form with a labelled party section."""
    doc = SimpleDocTemplate(path, pagesize=letter)
    story = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'CustomTitle',
        parent=styles['Heading1'],
        fontSize=16,
        textColor=colors.HexColor('#003366'),
        spaceAfter=30,
        alignment=TA_CENTER
    )
    story.append(Paragraph("WARRANTY CLAIM FORM", title_style))
    story.append(Spacer(1, 0.2*inch))

    table_style = TableStyle([
        ('BACKGROUND', (0, 0), (0, -1), colors.lightgrey),
        ('TEXTCOLOR', (0, 0), (-1, -1), colors.black),
        ('ALIGN', (0, 0), (0, -1), 'RIGHT'),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('GRID', (0, 0), (-1, -1), 1, colors.black),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ])

    # The section heading is the label the extractor classifies on
    story.append(Paragraph(f"<b>{section_label}</b>", styles['Heading2']))
    party_table = Table(party_rows, colWidths=[2*inch, 4*inch])
    party_table.setStyle(table_style)
    story.append(party_table)
    story.append(Spacer(1, 0.3*inch))

    story.append(Paragraph("<b>Claim Details:</b>", styles['Heading2']))
    claim_table = Table(claim_rows, colWidths=[2*inch, 4*inch])
    claim_table.setStyle(table_style)
    story.append(claim_table)
    story.append(Spacer(1, 0.3*inch))

    story.append(Paragraph("<b>NOTES:</b>", styles['Heading2']))
    story.append(Paragraph(notes, styles['Normal']))

    doc.build(story)
    print(f"Created {path}")


def create_claimant_claim():
    """Claimant claim for a replaced alternator, approved"""
    os.makedirs("claimant", exist_ok=True)
    _build_claim_pdf(
        "claimant/claim.pdf",
        "Claimant Information:",
        [
            ['Name:', 'John Smith'],
            ['Phone:', '(217) 555-0123'],
            ['Vehicle:', '2019 Honda Civic LX, VIN 2HGFC2F59KH512345'],
        ],
        [
            ['Claim Number:', 'WC-2024-001234'],
            ['Claim Date:', '2024:05:10'],
            ['Claim Status:', 'Approved'],
            ['Component:', 'Alternator'],
            ['Reason:', 'Alternator failed within the powertrain warranty period'],
        ],
        "Vehicle towed to the dealership after the battery warning light came on. "
        "Diagnosis confirmed a failed alternator."
    )


def create_dealer_claim():
    """Dealer claim for a brake caliper, rejected"""
    os.makedirs("dealer", exist_ok=True)
    _build_claim_pdf(
        "dealer/claim.pdf",
        "Dealer Information:",
        [
            ['Dealer Name:', 'Springfield Auto Mall'],
            ['Address:', '456 Commerce Drive, Springfield, IL 62702'],
        ],
        [
            ['Claim Number:', 'DC-2024-0456'],
            ['Claim Date:', 'June 3, 2024'],
            ['Claim Status:', 'Rejected'],
            ['Component:', 'Front brake caliper'],
            ['Reason:', 'Wear item excluded from warranty coverage'],
        ],
        "Customer reported grinding noise when braking. Pads and caliper worn."
    )


def create_service_center_claim():
    """Service center claim for a water pump, pending"""
    os.makedirs("service_center", exist_ok=True)
    _build_claim_pdf(
        "service_center/claim.pdf",
        "Service Center Information:",
        [
            ['Service Center:', 'QuickFix Service Center'],
            ['Location:', '89 Elm Street, Peoria, IL 61602'],
        ],
        [
            ['Claim Number:', 'SC-2024-0789'],
            ['Claim Date:', '2024-03-31'],
            ['Claim Status:', 'Pending'],
            ['Component:', 'Water pump'],
        ],
        "Coolant leak traced to the water pump seal. Awaiting warranty review."
    )


if __name__ == "__main__":
    print("Generating sample claim PDFs...")
    print("\nClaimant claim:")
    create_claimant_claim()

    print("\nDealer claim:")
    create_dealer_claim()

    print("\nService center claim:")
    create_service_center_claim()

    print("\n✓ All sample claim PDFs created successfully!")
