"""
Tests for CSV, text, mailto and PDF report exports.
"""
import csv
import io
from types import SimpleNamespace
from urllib.parse import unquote

import pytest

from app.services.pdf_export import pdf_exporter
from app.services.report_service import build_stop_reports
from app.services.reporting import report_aggregator
from app.services.reporting.export import (
    BASE_CSV_COLUMNS,
    csv_cell,
    email_payload,
    executive_summary_text,
    export_csv,
    export_filename,
)

from conftest import ROUTE_DAY, at, make_response, make_route, make_stop


@pytest.fixture
def day_report():
    route = make_route(total_distance=16_093.4, total_duration=1800, started_at=at(0), completed_at=at(125))
    stops = [
        make_stop(0, "completed", arrived_at=at(10), departed_at=at(27)),
        make_stop(1, "completed", arrived_at=at(40), departed_at=at(55)),
        make_stop(2, "skipped"),
    ]
    responses = [
        make_response("stop-0", "Any issues found?", "yesNo", True),
        make_response("stop-0", "Issue description", "text", "Gate, locked"),
        make_response("stop-0", "Customer satisfaction", "rating", 2),
        make_response("stop-1", "Customer satisfaction", "rating", 5),
        make_response("stop-1", "Take a photo", "photo", image_data="data:image/png;base64,AAA"),
    ]
    summary = report_aggregator.generate(route, stops, responses)
    return SimpleNamespace(
        date=ROUTE_DAY,
        summary=summary.to_dict(),
        stop_reports=build_stop_reports(stops, responses, report_aggregator),
    )


def parse_csv(text: str) -> list[dict]:
    return list(csv.DictReader(io.StringIO(text)))


class TestCsvCell:
    @pytest.mark.parametrize(
        "response,expected",
        [
            ({"question_type": "yesNo", "value": True}, "Yes"),
            ({"question_type": "yesNo", "value": None}, "No"),
            ({"question_type": "rating", "value": 4}, 4),
            ({"question_type": "rating", "value": None}, 0),
            ({"question_type": "photo", "image_data": "data:..."}, "Yes"),
            ({"question_type": "signature", "image_data": None}, "No"),
            ({"question_type": "text", "value": ""}, ""),
            ({"question_type": "number", "value": 12}, "12"),
        ],
    )
    def test_cell_values(self, response, expected):
        assert csv_cell(response) == expected


class TestCsvExport:
    def test_header_has_question_columns_in_first_seen_order(self, day_report):
        header = export_csv(day_report).splitlines()[0].split(",")

        assert header[: len(BASE_CSV_COLUMNS)] == BASE_CSV_COLUMNS
        assert header[len(BASE_CSV_COLUMNS):] == [
            "Any issues found?",
            "Issue description",
            "Customer satisfaction",
            "Take a photo",
        ]

    def test_one_row_per_stop(self, day_report):
        rows = parse_csv(export_csv(day_report))

        assert [row["Stop #"] for row in rows] == ["1", "2", "3"]
        assert rows[0]["Date"] == "2024-05-01"
        assert rows[0]["Time Spent (min)"] == "17"
        assert rows[0]["Any issues found?"] == "Yes"
        assert rows[0]["Issue description"] == "Gate, locked"
        assert rows[1]["Take a photo"] == "Yes"
        assert rows[1]["Any issues found?"] == ""
        assert rows[2]["Status"] == "skipped"
        assert rows[2]["Arrived At"] == ""

    def test_rows_end_with_crlf(self, day_report):
        assert export_csv(day_report).endswith("\r\n")

    def test_filename(self, day_report):
        assert export_filename(day_report, "csv") == "route-report-2024-05-01.csv"


class TestTextSummary:
    def test_sections(self, day_report):
        text = executive_summary_text(day_report)

        assert text.startswith("EXECUTIVE SUMMARY - Wednesday, May 01, 2024")
        assert "* Stops Completed: 2/3" in text
        assert "* Total Distance: 10.0 mi" in text
        assert "* Total Time: 2 hrs 5 min" in text
        assert "* Avg Time per Stop: 16 min" in text
        assert "[POSITIVE] Completion Rate: 67%" not in text
        assert "[NEUTRAL] Completion Rate: 67%" in text
        assert "1. " in text
        assert "[MEDIUM] Issue at Customer 0: Gate, locked" in text
        assert "[LOW] Stop skipped: Customer 2" in text
        assert text.endswith("Generated by Today Route Planner")

    def test_empty_report_has_no_optional_sections(self):
        summary = report_aggregator.generate(make_route(), [], []).to_dict()
        report = SimpleNamespace(date=ROUTE_DAY, summary=summary, stop_reports=[])

        text = executive_summary_text(report)

        assert "TRENDS" not in text
        assert "ITEMS REQUIRING ATTENTION" not in text
        assert "KEY INSIGHTS" in text
        assert "* Total Time: 0 hrs 0 min" in text


class TestEmailPayload:
    def test_payload(self, day_report):
        payload = email_payload(day_report, recipient="manager@example.com")

        assert payload["subject"] == "Route Report - 2024-05-01"
        assert payload["body"] == executive_summary_text(day_report)
        assert payload["mailto"].startswith("mailto:manager@example.com?subject=Route%20Report%20-%202024-05-01&body=")
        assert unquote(payload["mailto"].split("&body=", 1)[1]) == payload["body"]

    def test_payload_without_recipient(self, day_report):
        assert email_payload(day_report)["mailto"].startswith("mailto:?subject=")


class TestPdfExport:
    def test_pdf_bytes(self, day_report):
        pdf = pdf_exporter.export_day_report(day_report)

        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    def test_pdf_for_empty_report(self):
        summary = report_aggregator.generate(make_route(), [], []).to_dict()
        report = SimpleNamespace(date=ROUTE_DAY, summary=summary, stop_reports=[])

        assert pdf_exporter.export_day_report(report).startswith(b"%PDF")
