"""
PDF export of day reports.
"""

import io
from datetime import datetime
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm, mm
from reportlab.platypus import (
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from app.models.question import QuestionType
from app.services.reporting.export import ReportLike
from app.services.reporting.timing import format_clock, format_duration
from app.services.routing.geo import km_to_miles

SEVERITY_COLORS = {
    "high": "#ef4444",
    "medium": "#f59e0b",
    "low": "#64748b",
}

MAX_RESPONSES_PER_STOP = 5


class PDFExporter:
    """Export day reports to PDF."""

    def __init__(self):
        self.styles = getSampleStyleSheet()
        self._setup_styles()

    def _setup_styles(self):
        """Setup custom styles."""
        self.styles.add(
            ParagraphStyle(
                name="Title_Custom",
                parent=self.styles["Title"],
                fontSize=18,
                textColor=colors.HexColor("#2563eb"),
                spaceAfter=12,
            )
        )
        self.styles.add(
            ParagraphStyle(
                name="Subtitle",
                parent=self.styles["Normal"],
                fontSize=12,
                textColor=colors.gray,
                spaceAfter=10,
            )
        )
        self.styles.add(
            ParagraphStyle(
                name="Bullet_Custom",
                parent=self.styles["Normal"],
                fontSize=10,
                leftIndent=10,
                spaceAfter=3,
            )
        )
        self.styles.add(
            ParagraphStyle(
                name="Response",
                parent=self.styles["Normal"],
                fontSize=8,
                textColor=colors.HexColor("#64748b"),
                leftIndent=20,
            )
        )

    @staticmethod
    def _response_text(response: dict) -> str:
        question_type = response.get("question_type")
        value = response.get("value")
        if question_type == QuestionType.YES_NO:
            shown = "Yes" if value else "No"
        elif question_type == QuestionType.RATING:
            shown = f"{value}/5"
        elif question_type in (QuestionType.PHOTO, QuestionType.SIGNATURE):
            shown = "[Captured]" if response.get("image_data") else "[Not provided]"
        else:
            shown = str(value) if value else "-"
        return f"{response.get('question_text', '')}: {shown}"

    def _summary_table(self, summary: dict) -> Table:
        data = [
            ["Total Stops", str(summary["total_stops"]), "Completed", str(summary["completed_stops"])],
            ["Skipped", str(summary["skipped_stops"]), "Total Distance", f"{km_to_miles(summary['total_distance']):.1f} mi"],
            ["Drive Time", format_duration(summary["total_drive_time"]), "On-Site Time", format_duration(summary["total_on_site_time"])],
            ["Total Time", format_duration(summary["total_time"]), "Pending", str(summary["pending_stops"])],
            ["Locations/Hour", f"{summary['locations_per_hour']:.1f}", "Avg Time/Stop", f"{summary['average_time_per_stop']} min"],
        ]
        table = Table(data, colWidths=[3.5 * cm, 3 * cm, 3.5 * cm, 3 * cm])
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (0, -1), colors.lightgrey),
                    ("BACKGROUND", (2, 0), (2, -1), colors.lightgrey),
                    ("FONTSIZE", (0, 0), (-1, -1), 10),
                    ("PADDING", (0, 0), (-1, -1), 5),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ]
            )
        )
        return table

    def _stops_table(self, stop_reports: list[dict]) -> Table:
        table_data = [["#", "Stop", "Status", "Arrived", "Departed", "Time"]]
        for index, stop in enumerate(stop_reports, start=1):
            table_data.append(
                [
                    str(index),
                    (stop.get("name") or stop.get("address", ""))[:40],
                    stop.get("status", "").upper(),
                    format_clock(stop.get("arrived_at")) or "-",
                    format_clock(stop.get("departed_at")) or "-",
                    f"{stop.get('time_spent', 0)} min" if stop.get("time_spent") else "-",
                ]
            )

        table = Table(
            table_data,
            colWidths=[1 * cm, 6.5 * cm, 2.5 * cm, 2 * cm, 2 * cm, 2 * cm],
        )
        table.setStyle(
            TableStyle(
                [
                    # Header style
                    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2563eb")),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTSIZE", (0, 0), (-1, 0), 9),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("ALIGN", (0, 0), (-1, 0), "CENTER"),
                    # Body style
                    ("FONTSIZE", (0, 1), (-1, -1), 8),
                    ("ALIGN", (0, 1), (0, -1), "CENTER"),
                    ("ALIGN", (3, 1), (5, -1), "CENTER"),
                    # Grid
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f3f4f6")]),
                    ("PADDING", (0, 0), (-1, -1), 4),
                ]
            )
        )
        return table

    def export_day_report(self, report: ReportLike) -> bytes:
        """
        Export a day report to PDF.

        Args:
            report: Stored report with summary and stop reports

        Returns:
            PDF file as bytes
        """
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=2 * cm,
            leftMargin=2 * cm,
            topMargin=2 * cm,
            bottomMargin=2 * cm,
        )

        summary = report.summary
        elements = []

        elements.append(Paragraph("Daily Route Report", self.styles["Title_Custom"]))
        elements.append(Paragraph(report.date.strftime("%A, %B %d, %Y"), self.styles["Subtitle"]))

        elements.append(Spacer(1, 5 * mm))
        elements.append(Paragraph("Executive Summary", self.styles["Heading2"]))
        elements.append(self._summary_table(summary))

        if summary.get("trends"):
            elements.append(Spacer(1, 5 * mm))
            elements.append(Paragraph("Trends", self.styles["Heading3"]))
            for trend in summary["trends"]:
                elements.append(
                    Paragraph(
                        f"&bull; {escape(trend['label'])}: {escape(trend['value'])}",
                        self.styles["Bullet_Custom"],
                    )
                )

        if summary.get("observations"):
            elements.append(Spacer(1, 5 * mm))
            elements.append(Paragraph("Key Observations", self.styles["Heading3"]))
            for observation in summary["observations"]:
                elements.append(Paragraph(f"&bull; {escape(observation)}", self.styles["Bullet_Custom"]))

        if summary.get("issues"):
            elements.append(Spacer(1, 5 * mm))
            elements.append(Paragraph("Flagged Issues", self.styles["Heading3"]))
            for issue in summary["issues"]:
                color = SEVERITY_COLORS.get(issue["severity"], "#000000")
                elements.append(
                    Paragraph(
                        f'<font color="{color}">[{issue["severity"].upper()}]</font> '
                        f"{escape(issue['description'])}",
                        self.styles["Bullet_Custom"],
                    )
                )

        elements.append(Spacer(1, 8 * mm))
        elements.append(Paragraph("Stop Details", self.styles["Heading2"]))

        if report.stop_reports:
            elements.append(self._stops_table(report.stop_reports))

            for index, stop in enumerate(report.stop_reports, start=1):
                responses = stop.get("responses", [])
                if not responses:
                    continue
                elements.append(Spacer(1, 3 * mm))
                elements.append(
                    Paragraph(
                        f"{index}. {escape(stop.get('name') or stop.get('address', ''))}",
                        self.styles["Normal"],
                    )
                )
                for response in responses[:MAX_RESPONSES_PER_STOP]:
                    elements.append(Paragraph(escape(self._response_text(response)), self.styles["Response"]))
                if len(responses) > MAX_RESPONSES_PER_STOP:
                    elements.append(
                        Paragraph(
                            f"... and {len(responses) - MAX_RESPONSES_PER_STOP} more responses",
                            self.styles["Response"],
                        )
                    )

        elements.append(Spacer(1, 15 * mm))
        elements.append(
            Paragraph(
                f"Generated by Today Route Planner - {datetime.now().strftime('%Y-%m-%d %H:%M')}",
                self.styles["Subtitle"],
            )
        )

        doc.build(elements)
        return buffer.getvalue()


pdf_exporter = PDFExporter()
