"""CSV and JSON import/export of flashcards.

Imports are lenient: rows missing either side are skipped and counted, and a
structural problem (unreadable JSON, missing columns) is reported in the
result instead of raised. Exports are strict.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from typing import Any, Iterable, Literal

from pydantic import BaseModel, Field, ValidationError

from cardcoach.models.card import CardCreate, Flashcard
from cardcoach.repositories.normalize import coerce_tags
from cardcoach.srs.time import utc_datetime_to_iso_z

logger = logging.getLogger(__name__)


TransferFormat = Literal["csv", "json"]

# Column names tried when the configured ones are absent
FALLBACK_FRONT_COLUMN = "front"
FALLBACK_BACK_COLUMN = "back"

EXPORT_FIELDS = ["italian", "english", "tags", "difficulty", "mastered", "nextReview"]


class ExportError(Exception):
    """Raised when cards cannot be exported."""

    pass


class ImportOptions(BaseModel):
    """How to read an import file."""

    format: TransferFormat = Field("csv", description="Input format")
    frontColumn: str = Field("italian", description="Column/key holding the front side")
    backColumn: str = Field("english", description="Column/key holding the back side")
    tagsColumn: str = Field("tags", description="Column/key holding ';'-separated tags")
    delimiter: str = Field(",", min_length=1, max_length=1, description="CSV field delimiter")


class ImportResult(BaseModel):
    """Outcome of parsing an import file."""

    success: bool
    cards: list[CardCreate] = Field(default_factory=list)
    imported: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = Field(default_factory=list)


class _ImportFormatError(Exception):
    pass


def _resolve_column(columns: Iterable[str], wanted: str, fallback: str) -> str | None:
    lowered = {column.strip().lower(): column for column in columns if column}
    for name in (wanted, fallback):
        if name.lower() in lowered:
            return lowered[name.lower()]
    return None


def _rows_from_csv(content: str, options: ImportOptions) -> tuple[list[dict[str, Any]], str, str, str | None]:
    reader = csv.DictReader(io.StringIO(content.strip()), delimiter=options.delimiter)
    columns = reader.fieldnames or []

    front_column = _resolve_column(columns, options.frontColumn, FALLBACK_FRONT_COLUMN)
    back_column = _resolve_column(columns, options.backColumn, FALLBACK_BACK_COLUMN)
    if front_column is None or back_column is None:
        raise _ImportFormatError(
            f"Could not find columns for front ({options.frontColumn}) or back ({options.backColumn})"
        )
    tags_column = _resolve_column(columns, options.tagsColumn, options.tagsColumn)
    return list(reader), front_column, back_column, tags_column


def _rows_from_json(content: str, options: ImportOptions) -> tuple[list[dict[str, Any]], str, str, str | None]:
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise _ImportFormatError(f"Failed to parse JSON: {e}")
    if not isinstance(parsed, list):
        raise _ImportFormatError("JSON content must be an array of objects")

    rows = [row for row in parsed if isinstance(row, dict)]
    keys = {key for row in rows for key in row}
    front_key = _resolve_column(keys, options.frontColumn, FALLBACK_FRONT_COLUMN) or options.frontColumn
    back_key = _resolve_column(keys, options.backColumn, FALLBACK_BACK_COLUMN) or options.backColumn
    tags_key = _resolve_column(keys, options.tagsColumn, options.tagsColumn)
    return parsed, front_key, back_key, tags_key


def import_flashcards(content: str, options: ImportOptions | None = None) -> ImportResult:
    """Parse flashcards out of CSV or JSON content."""
    options = options or ImportOptions()

    try:
        if options.format == "json":
            rows, front_key, back_key, tags_key = _rows_from_json(content, options)
        else:
            rows, front_key, back_key, tags_key = _rows_from_csv(content, options)
    except (_ImportFormatError, csv.Error) as e:
        logger.warning("Import failed (%s): %s", options.format, e)
        return ImportResult(success=False, failed=1, errors=[str(e)])

    cards: list[CardCreate] = []
    errors: list[str] = []
    skipped = 0
    for number, row in enumerate(rows, start=1):
        if not isinstance(row, dict):
            skipped += 1
            continue
        front = str(row.get(front_key) or "").strip()
        back = str(row.get(back_key) or "").strip()
        if not front or not back:
            skipped += 1
            continue
        tags = coerce_tags(row.get(tags_key)) if tags_key else []
        try:
            cards.append(CardCreate(front=front, back=back, tags=tags))
        except ValidationError as e:
            errors.append(f"Row {number}: {e.errors()[0]['msg']}")

    logger.info(
        "Parsed %d cards from %s import (%d skipped, %d failed)",
        len(cards),
        options.format,
        skipped,
        len(errors),
    )
    return ImportResult(
        success=True,
        cards=cards,
        imported=len(cards),
        skipped=skipped,
        failed=len(errors),
        errors=errors,
    )


def _export_row(card: Flashcard) -> dict[str, Any]:
    return {
        "italian": card.front,
        "english": card.back,
        "tags": ";".join(card.tags),
        "difficulty": card.difficulty,
        "mastered": card.mastered,
        "nextReview": utc_datetime_to_iso_z(card.nextReview) if card.nextReview else None,
    }


def export_flashcards(cards: list[Flashcard], fmt: str = "csv") -> str:
    """Serialize cards to CSV or JSON.

    Raises:
        ExportError: If there are no cards or the format is unknown
    """
    if not cards:
        raise ExportError("No flashcards to export")

    rows = [_export_row(card) for card in cards]
    if fmt == "json":
        return json.dumps(rows, ensure_ascii=False, indent=2)
    if fmt == "csv":
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=EXPORT_FIELDS, lineterminator="\n")
        writer.writeheader()
        for row in rows:
            writer.writerow({**row, "nextReview": row["nextReview"] or ""})
        return buffer.getvalue()
    raise ExportError(f"Unsupported export format: {fmt}")
