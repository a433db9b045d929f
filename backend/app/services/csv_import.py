"""
CSV import of stops and question templates.

Rows are read with the stdlib csv module. Header names are matched
case-insensitively and blank lines are skipped. Row problems are collected
as warnings so one bad line never aborts the whole file.
"""
import csv
import io
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from app.core.exceptions import ValidationException
from app.models.question import QuestionType

TRUE_VALUES = {"true", "yes", "1"}

_QUESTION_TYPES = {qt.value.lower(): qt for qt in QuestionType}


class CSVImportError(ValidationException):
    """The upload could not be read as CSV at all."""
    error_code = "INVALID_CSV"


@dataclass
class ImportResult:
    """Outcome of one import: created records plus row-level messages."""
    created: list[Any] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.created) and not self.errors


@dataclass
class StopRow:
    line: int
    address: str
    name: Optional[str] = None


@dataclass
class QuestionRow:
    line: int
    text: str
    type: QuestionType
    options: Optional[list[str]]
    required: bool


def read_rows(content: Union[bytes, str]) -> list[tuple[int, dict[str, str]]]:
    """
    Parse CSV content into (line number, row) pairs.

    Line numbers count the header as line 1. Keys are stripped and
    lowercased, values stripped.

    Raises:
        CSVImportError: If the content is not UTF-8 text or not valid CSV
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CSVImportError(f"Failed to parse CSV: {e}") from e

    try:
        reader = csv.DictReader(io.StringIO(content))
        if reader.fieldnames is None:
            return []
        reader.fieldnames = [name.strip().lower() for name in reader.fieldnames]

        rows = []
        for line, row in enumerate(reader, start=2):
            # Surplus cells land under the None key
            cleaned = {key: (value or "").strip() for key, value in row.items() if key is not None}
            if any(cleaned.values()):
                rows.append((line, cleaned))
        return rows
    except csv.Error as e:
        raise CSVImportError(f"Failed to parse CSV: {e}") from e


def parse_required(value: str) -> bool:
    return value.strip().lower() in TRUE_VALUES


def split_options(value: str) -> list[str]:
    """Options separated by '|', or by ',' when no pipe is present."""
    separator = "|" if "|" in value else ","
    return [option.strip() for option in value.split(separator) if option.strip()]


def parse_stop_rows(rows: list[tuple[int, dict[str, str]]]) -> list[StopRow]:
    """Rows with a non-blank address; the name column is optional."""
    return [
        StopRow(line=line, address=row["address"], name=row.get("name") or None)
        for line, row in rows
        if row.get("address")
    ]


def parse_question_rows(
    rows: list[tuple[int, dict[str, str]]],
    warnings: list[str],
) -> list[QuestionRow]:
    """
    Validate question rows, appending a warning for each problem.

    Missing text skips the row. An unknown type falls back to text.
    Multiple choice needs options: with none the row is skipped, with a
    single one it is kept and warned about.
    """
    parsed = []
    valid_types = ", ".join(qt.value for qt in QuestionType)

    for line, row in rows:
        text = row.get("text") or row.get("question")
        if not text:
            warnings.append(f"Row {line}: Missing question text, skipping.")
            continue

        raw_type = row.get("type", "")
        question_type = _QUESTION_TYPES.get(raw_type.lower())
        if question_type is None:
            warnings.append(
                f'Row {line}: Invalid type "{raw_type}". Valid types: {valid_types}. Defaulting to "text".'
            )
            question_type = QuestionType.TEXT

        options = None
        if question_type == QuestionType.MULTIPLE_CHOICE:
            options = split_options(row.get("options", ""))
            if not options:
                warnings.append(f"Row {line}: Multiple choice question has no options, skipping.")
                continue
            if len(options) < 2:
                warnings.append(
                    f"Row {line}: Multiple choice needs at least 2 options. Found {len(options)}."
                )

        parsed.append(
            QuestionRow(
                line=line,
                text=text,
                type=question_type,
                options=options,
                required=parse_required(row.get("required", "")),
            )
        )

    return parsed
