"""
CSV, plain-text and mailto exports of a day report.

Exports read the persisted report (summary dict plus stop report dicts),
so an exported file always matches what was stored.
"""
import csv
import io
from datetime import date
from typing import Any, Optional, Protocol
from urllib.parse import quote

from app.models.question import QuestionType
from app.services.reporting.categories import numeric_value
from app.services.routing.geo import km_to_miles

SECTION_RULE = "-" * 32

BASE_CSV_COLUMNS = [
    "Date",
    "Stop #",
    "Address",
    "Name",
    "Status",
    "Arrived At",
    "Departed At",
    "Time Spent (min)",
]


class ReportLike(Protocol):
    date: date
    summary: dict
    stop_reports: list


def _csv_column_name(question_text: str) -> str:
    return question_text.replace(",", " ").replace("\n", " ").replace("\r", " ")


def csv_cell(response: dict) -> Any:
    """Spreadsheet value of one stored response."""
    question_type = response.get("question_type")
    value = response.get("value")

    if question_type == QuestionType.YES_NO:
        return "Yes" if value else "No"
    if question_type == QuestionType.RATING:
        number = numeric_value(value)
        if number is None:
            return 0
        return int(number) if number.is_integer() else number
    if question_type in (QuestionType.PHOTO, QuestionType.SIGNATURE):
        return "Yes" if response.get("image_data") else "No"
    if not value:
        return ""
    return str(value)


def export_csv(report: ReportLike) -> str:
    """
    One row per stop, one extra column per question text.

    Question columns appear in first-seen order across all stops.
    """
    rows: list[dict] = []
    question_columns: list[str] = []

    for index, stop in enumerate(report.stop_reports, start=1):
        row = {
            "Date": report.date.isoformat(),
            "Stop #": index,
            "Address": stop.get("address", ""),
            "Name": stop.get("name") or "",
            "Status": stop.get("status", ""),
            "Arrived At": stop.get("arrived_at") or "",
            "Departed At": stop.get("departed_at") or "",
            "Time Spent (min)": stop.get("time_spent", 0),
        }
        for response in stop.get("responses", []):
            column = _csv_column_name(response.get("question_text", ""))
            if column not in question_columns and column not in BASE_CSV_COLUMNS:
                question_columns.append(column)
            row[column] = csv_cell(response)
        rows.append(row)

    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=BASE_CSV_COLUMNS + question_columns,
        restval="",
        lineterminator="\r\n",
    )
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def _long_date(value: date) -> str:
    return value.strftime("%A, %B %d, %Y")


def executive_summary_text(report: ReportLike) -> str:
    """Shareable plain-text executive summary."""
    summary = report.summary
    total_time = int(summary.get("total_time", 0))
    miles = km_to_miles(summary.get("total_distance", 0.0))

    lines = [f"EXECUTIVE SUMMARY - {_long_date(report.date)}", ""]

    lines += [
        "PERFORMANCE METRICS",
        SECTION_RULE,
        f"* Stops Completed: {summary.get('completed_stops', 0)}/{summary.get('total_stops', 0)}",
        f"* Total Distance: {miles:.1f} mi",
        f"* Total Time: {total_time // 60} hrs {total_time % 60} min",
        f"* Efficiency: {summary.get('locations_per_hour', 0.0):.1f} locations/hour",
        f"* Avg Time per Stop: {summary.get('average_time_per_stop', 0)} min",
        "",
    ]

    trends = summary.get("trends", [])
    if trends:
        lines += ["TRENDS", SECTION_RULE]
        lines += [f"[{t['trend'].upper()}] {t['label']}: {t['value']}" for t in trends]
        lines.append("")

    observations = summary.get("observations", [])
    if observations:
        lines += ["KEY INSIGHTS", SECTION_RULE]
        lines += [f"{i}. {obs}" for i, obs in enumerate(observations, start=1)]
        lines.append("")

    issues = summary.get("issues", [])
    if issues:
        lines += ["ITEMS REQUIRING ATTENTION", SECTION_RULE]
        lines += [f"[{i['severity'].upper()}] {i['description']}" for i in issues]
        lines.append("")

    lines += [SECTION_RULE, "Generated by Today Route Planner"]
    return "\n".join(lines)


def email_payload(report: ReportLike, recipient: Optional[str] = None) -> dict:
    """
    Subject, body and mailto link for sharing a report.

    Nothing is sent; the link opens the user's mail client.
    """
    subject = f"Route Report - {report.date.isoformat()}"
    body = executive_summary_text(report)
    mailto = f"mailto:{recipient or ''}?subject={quote(subject)}&body={quote(body)}"
    return {"subject": subject, "body": body, "mailto": mailto}


def export_filename(report: ReportLike, extension: str) -> str:
    return f"route-report-{report.date.isoformat()}.{extension}"
