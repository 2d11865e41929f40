"""PDF monthly report generation using ReportLab."""

import io
from datetime import datetime

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from finflow.utils.formatting import format_currency

HEADER_STYLE = [
    ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#007180')),
    ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
    ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
    ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
    ('FONTSIZE', (0, 0), (-1, -1), 9),
    ('BOTTOMPADDING', (0, 0), (-1, 0), 6),
    ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
]


def _signed_percent(value: int) -> str:
    return f"+{value}%" if value > 0 else f"{value}%"


def generate_monthly_report_pdf(report: dict, owner_name: str = '', currency: str = 'IDR') -> bytes:
    """Render a monthly report (as built by reports.monthly_report) to PDF.

    Args:
        report: Monthly report dict
        owner_name: Name shown under the title
        currency: Currency code for amounts

    Returns:
        PDF content as bytes
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        topMargin=0.5*inch,
        bottomMargin=0.5*inch,
        leftMargin=0.75*inch,
        rightMargin=0.75*inch
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle('Title', parent=styles['Heading1'], fontSize=16, spaceAfter=6)
    heading_style = ParagraphStyle('Heading', parent=styles['Heading2'], fontSize=12, spaceBefore=12, spaceAfter=6)
    normal_style = styles['Normal']
    note_style = ParagraphStyle('Note', parent=normal_style, fontSize=8, textColor=colors.grey)

    month_display = datetime.strptime(report['month'], '%Y-%m').strftime('%B %Y')

    elements = []

    # Title
    elements.append(Paragraph(f"Monthly Report: {month_display}", title_style))
    if owner_name:
        elements.append(Paragraph(owner_name, normal_style))
    elements.append(Spacer(1, 12))

    # Totals with comparison against the previous month
    comparison = report['comparison_with_previous']
    elements.append(Paragraph("Summary", heading_style))
    summary_data = [
        ['', 'Amount', 'vs last month'],
        ['Income', format_currency(report['total_income'], currency), _signed_percent(comparison['income_change'])],
        ['Expenses', format_currency(report['total_expense'], currency), _signed_percent(comparison['expense_change'])],
        ['Remaining', format_currency(report['remaining_balance'], currency), ''],
    ]
    summary_table = Table(summary_data, colWidths=[1.8*inch, 1.8*inch, 1.4*inch])
    summary_table.setStyle(TableStyle(HEADER_STYLE + [
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
    ]))
    elements.append(summary_table)
    elements.append(Spacer(1, 6))

    ratio = report['need_want_ratio']
    elements.append(Paragraph(
        f"Needs {ratio['need_percentage']}% / Wants {ratio['want_percentage']}% "
        f"(wants {_signed_percent(comparison['want_change'])} vs last month)",
        normal_style
    ))

    # Top categories
    elements.append(Paragraph("Top Categories", heading_style))
    if report['top_categories']:
        category_data = [['Category', 'Amount', 'Share']]
        for cat in report['top_categories']:
            category_data.append([
                cat['category'] or '-',
                format_currency(cat['amount'], currency),
                f"{cat['percentage']}%"
            ])
        category_table = Table(category_data, colWidths=[2.6*inch, 1.6*inch, 0.8*inch])
        category_table.setStyle(TableStyle(HEADER_STYLE))
        elements.append(category_table)
    else:
        elements.append(Paragraph("No expenses recorded this month.", note_style))

    # Daily breakdown
    elements.append(Paragraph("Daily Breakdown", heading_style))
    if report['daily_breakdown']:
        daily_data = [['Date', 'Income', 'Expense']]
        for day in report['daily_breakdown']:
            daily_data.append([
                day['date'],
                format_currency(day['income'], currency),
                format_currency(day['expense'], currency)
            ])
        daily_table = Table(daily_data, colWidths=[1.6*inch, 1.7*inch, 1.7*inch], repeatRows=1)
        daily_table.setStyle(TableStyle(HEADER_STYLE))
        elements.append(daily_table)
    else:
        elements.append(Paragraph("No transactions this month.", note_style))

    # Footer
    elements.append(Spacer(1, 24))
    elements.append(Paragraph("Generated by FinFlow", note_style))

    doc.build(elements)
    buffer.seek(0)

    return buffer.getvalue()
