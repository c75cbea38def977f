"""
Report Service - CSV and PDF exports of results and students

PDF layout follows the school's printed result sheet: title, a block naming
the subject/class/term/session, then one table row per attempt.
"""

from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.enums import TA_CENTER
from reportlab.lib import colors
from reportlab.lib.colors import HexColor
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from datetime import datetime
from typing import List, Optional, Dict
from io import BytesIO, StringIO
import csv

from cbt.core.logging_config import logger
from cbt.models.test_result import TestResult
from cbt.models.user import User

RESULT_CSV_HEADERS = [
    "Student Name", "Subject", "Class", "Term", "Session", "Test Type",
    "Score", "Total Possible Score", "Percentage", "Time Taken", "Date",
]

RESULT_PDF_HEADERS = ["Student Name", "Test Type", "Score", "Total", "Percentage", "Time Taken", "Date"]

STUDENT_CSV_HEADERS = ["ID", "Email", "Full Name", "Registration Date"]


def format_time_taken(seconds: Optional[int]) -> str:
    """125 -> '2m 5s'; missing values render as N/A"""
    if seconds is None:
        return "N/A"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s"


def format_percentage(result: TestResult) -> str:
    return f"{result.percentage:.2f}%"


def format_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def results_filename(filters: Dict[str, str], extension: str) -> str:
    parts = [filters["subject"], filters["class"], filters["term"], filters["session"]]
    safe = [p.replace("/", "-").replace(" ", "_") for p in parts]
    return f"test_results_{'_'.join(safe)}.{extension}"


class ReportService:

    def results_csv(self, results: List[TestResult]) -> str:
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(RESULT_CSV_HEADERS)

        for r in results:
            code = r.test_code
            writer.writerow([
                r.student.display_name if r.student else "Unknown",
                code.subject if code else "",
                code.class_name if code else "",
                code.term if code else "",
                code.session if code else "",
                code.test_type.value if code else "",
                r.score,
                r.total_possible_score,
                format_percentage(r),
                format_time_taken(r.time_taken),
                format_date(r.created_at),
            ])

        return output.getvalue()

    def students_csv(self, students: List[User]) -> str:
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(STUDENT_CSV_HEADERS)

        for s in students:
            writer.writerow([
                str(s.id),
                s.email,
                s.profile.full_name if s.profile and s.profile.full_name else "",
                format_date(s.created_at),
            ])

        return output.getvalue()

    def results_pdf(self, results: List[TestResult], filters: Dict[str, str]) -> bytes:
        """Render the result sheet as PDF bytes"""
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=landscape(A4),
            leftMargin=0.6 * inch,
            rightMargin=0.6 * inch,
            topMargin=0.6 * inch,
            bottomMargin=0.6 * inch,
            title="Test Results Report",
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            name='ReportTitle',
            parent=styles['Title'],
            fontSize=20,
            textColor=HexColor('#1a1a1a'),
            spaceAfter=12,
            alignment=TA_CENTER,
            fontName='Helvetica-Bold'
        )
        info_style = ParagraphStyle(
            name='ReportInfo',
            parent=styles['Normal'],
            fontSize=11,
            textColor=HexColor('#4a4a4a'),
            spaceAfter=4,
        )

        story = [
            Paragraph("Test Results Report", title_style),
            Paragraph(f"<b>Subject:</b> {filters['subject']}", info_style),
            Paragraph(f"<b>Class:</b> {filters['class']}", info_style),
            Paragraph(f"<b>Term:</b> {filters['term']}", info_style),
            Paragraph(f"<b>Session:</b> {filters['session']}", info_style),
            Paragraph(f"<b>Generated:</b> {datetime.utcnow().strftime('%Y-%m-%d %H:%M')} UTC", info_style),
            Paragraph(f"<b>Total Students:</b> {len(results)}", info_style),
            Spacer(1, 0.25 * inch),
        ]

        rows = [RESULT_PDF_HEADERS]
        for r in results:
            rows.append([
                r.student.display_name if r.student else "Unknown",
                r.test_code.test_type.value if r.test_code else "",
                str(r.score),
                str(r.total_possible_score),
                format_percentage(r),
                format_time_taken(r.time_taken),
                format_date(r.created_at),
            ])

        table = Table(rows, repeatRows=1, colWidths=[2.6 * inch, 1.0 * inch, 0.8 * inch, 0.8 * inch,
                                                     1.1 * inch, 1.1 * inch, 1.2 * inch])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), HexColor('#2c3e50')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('ALIGN', (1, 0), (-1, -1), 'CENTER'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, HexColor('#f4f6f7')]),
            ('GRID', (0, 0), (-1, -1), 0.5, HexColor('#bdc3c7')),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ]))
        story.append(table)

        doc.build(story)
        pdf = buffer.getvalue()
        buffer.close()

        logger.info(f"Rendered results PDF with {len(results)} rows ({len(pdf)} bytes)")
        return pdf


report_service = ReportService()
