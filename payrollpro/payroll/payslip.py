"""
Payslip PDF rendering.

Builds a one-page A4 payslip from a ``PayrollRecord`` with ReportLab:
employee block, earnings and deductions tables, adjustments and net pay.
"""

import io
import logging

from django.conf import settings
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph
from reportlab.platypus import SimpleDocTemplate
from reportlab.platypus import Spacer
from reportlab.platypus import Table
from reportlab.platypus import TableStyle

from .exceptions import ArtifactGenerationError

logger = logging.getLogger(__name__)

BRAND_COLOR = colors.HexColor("#1a365d")


def payslip_filename(record) -> str:
    return f"payslip_{record.employee.employee_id}_{record.month}.pdf"


class PayslipRenderer:
    """Render payslips to PDF bytes."""

    def __init__(self, company_name: str | None = None, currency: str | None = None):
        conf = getattr(settings, "PAYROLL", {})
        self.company_name = company_name or conf.get("COMPANY_NAME", "PayrollPro")
        self.currency = currency or conf.get("CURRENCY", "INR")

    def _format_amount(self, amount) -> str:
        return f"{self.currency} {amount:,.2f}"

    def render(self, record) -> bytes:
        """Return the PDF for ``record``.

        Raises:
            ArtifactGenerationError: if ReportLab fails to build the document.
        """
        try:
            return self._build(record)
        except ArtifactGenerationError:
            raise
        except Exception as exc:
            logger.warning("Payslip rendering failed for record %s", record.pk)
            msg = f"Could not render payslip: {exc}"
            raise ArtifactGenerationError(msg) from exc

    def _build(self, record) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=20 * mm,
            leftMargin=20 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            title=payslip_filename(record),
        )
        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "PayslipTitle",
            parent=styles["Heading1"],
            fontSize=20,
            textColor=BRAND_COLOR,
            spaceAfter=6,
        )
        heading_style = ParagraphStyle(
            "PayslipHeading",
            parent=styles["Heading2"],
            fontSize=12,
            textColor=BRAND_COLOR,
            spaceBefore=10,
            spaceAfter=4,
        )
        right_style = ParagraphStyle(
            "PayslipRight", parent=styles["Normal"], fontSize=10, alignment=TA_RIGHT
        )

        elements = [
            Paragraph(f"<b>{self.company_name}</b>", title_style),
            Paragraph(f"Payslip for {record.month}", heading_style),
            self._employee_table(record),
            Spacer(1, 12),
            Paragraph("Earnings", heading_style),
            self._amount_table(
                [
                    ("Basic Salary", record.basic),
                    ("HRA", record.hra),
                    ("Dearness Allowance", record.da),
                    ("Special Allowance", record.special_allowance),
                    ("Other Allowances", record.other_allowances),
                ],
                ("Gross Salary", record.gross),
            ),
            Paragraph("Deductions", heading_style),
            self._amount_table(
                [
                    ("Provident Fund", record.pf),
                    ("Professional Tax", record.professional_tax),
                    ("ESI", record.esi),
                    (f"Loss of Pay ({record.lop_days} days)", record.lop_deduction),
                ],
                ("Total Deductions", record.total_deductions),
            ),
        ]
        adjustments = list(record.adjustments.all())
        if adjustments:
            elements.append(Paragraph("Adjustments", heading_style))
            elements.append(
                self._amount_table(
                    [
                        (f"{a.adjustment_type}: {a.description or '-'}", a.signed_amount)
                        for a in adjustments
                    ],
                    ("Net Adjustment", record.total_adjustment),
                )
            )
        elements += [
            Spacer(1, 12),
            Paragraph(
                f"<b>Net Salary: {self._format_amount(record.net_salary)}</b>",
                right_style,
            ),
            Spacer(1, 24),
            Paragraph(
                f"Generated on {timezone.localdate():%d %B %Y}. "
                "This is a computer generated payslip.",
                styles["Italic"],
            ),
        ]
        doc.build(elements)
        return buffer.getvalue()

    def _employee_table(self, record):
        employee = record.employee
        bank = getattr(employee, "bank_detail", None)
        rows = [
            ["Employee ID", employee.employee_id, "Department", employee.department],
            ["Name", employee.full_name, "Designation", employee.designation],
            [
                "PAN",
                employee.pan_number or "-",
                "Bank Account",
                bank.masked_account_number if bank else "-",
            ],
            [
                "Payment Method",
                record.payment_method,
                "Transaction",
                record.transaction_id or "-",
            ],
        ]
        table = Table(rows, colWidths=[90, 160, 90, 160])
        table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                    ("FONTNAME", (2, 0), (2, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ]
            )
        )
        return table

    def _amount_table(self, rows, total):
        data = [["Component", "Amount"]]
        data += [[label, self._format_amount(amount)] for label, amount in rows]
        data.append([total[0], self._format_amount(total[1])])
        table = Table(data, colWidths=[350, 150])
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), BRAND_COLOR),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                    ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                    (
                        "ROWBACKGROUNDS",
                        (0, 1),
                        (-1, -2),
                        [colors.white, colors.HexColor("#f8f9fa")],
                    ),
                ]
            )
        )
        return table
