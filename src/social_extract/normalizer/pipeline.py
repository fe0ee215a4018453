"""Main reply-normalization entry point and row assembly.

Turns the raw text returned by the vision model into the canonical table text
plus an ordered list of typed rows:

  1. Isolate the table block (fenced block, first table-like line, or all).
  2. Skip a leading header row and the markdown divider beneath it.
  3. Drop blank and separator lines, tokenize the rest into cells.
  4. Map cells onto the active RowSchema; lines below its column gate are
     dropped silently because replies routinely contain stray prose.

Normalization is pure: no I/O, no hidden state, and it never raises on reply
content.  An empty row list means "nothing parsable", not an error.

Usage:
    python -m social_extract.normalizer.pipeline reply.txt
    cat reply.txt | python -m social_extract.normalizer.pipeline --schema v1
"""

import argparse
import logging
import sys
from collections.abc import Sequence

from pydantic import BaseModel

from social_extract.normalizer.classifiers import (
    HeaderPredicate,
    find_data_start,
    first_table_line,
    is_header_line,
    is_separator_line,
)
from social_extract.normalizer.export import export_tsv
from social_extract.normalizer.extraction import extract_canonical_text
from social_extract.normalizer.metrics import parse_metric
from social_extract.normalizer.schema import DEFAULT_SCHEMA_VERSION, SCHEMAS, Row, RowSchema, get_schema
from social_extract.normalizer.tokenizer import tokenize_line

logger = logging.getLogger(__name__)


class NormalizedReply(BaseModel):
    """Canonical table text plus the rows parsed from it, in source order."""

    canonical_text: str
    rows: list[Row]

    @property
    def row_count(self) -> int:
        """Number of parsed rows (0 means the reply held no recognizable table)."""
        return len(self.rows)


# ─── Row Assembly ────────────────────────────────────────────────────────────


def assemble_row(columns: Sequence[str], schema: RowSchema) -> Row | None:
    """Map positional *columns* onto *schema*, or return None if below its column gate.

    Empty or missing cells take the column default; cells past the last
    mapped position are ignored.  ``views_numeric`` is derived from the
    views display string.
    """
    if len(columns) < schema.min_columns:
        return None

    values: dict[str, str] = {}
    for idx, col in enumerate(schema.columns):
        cell = columns[idx] if idx < len(columns) else ""
        values[col.field] = cell or col.default

    views_display = values.get("views_display", "0")
    return Row(**values, views_numeric=parse_metric(views_display))


# ─── Main Entry Point ────────────────────────────────────────────────────────


def normalize(
    raw: str | None,
    schema: RowSchema | None = None,
    header_predicate: HeaderPredicate = is_header_line,
) -> NormalizedReply:
    """Normalize a raw model reply into canonical text and typed rows.

    *schema* defaults to the current schema version.  *header_predicate*
    decides whether the first canonical line is a header row.
    """
    schema = schema or get_schema()
    canonical = extract_canonical_text(raw or "")
    if not canonical:
        return NormalizedReply(canonical_text="", rows=[])

    lines = canonical.split("\n")
    # Title lines above the table are not data; the header check starts at the table.
    table_start = first_table_line(lines)
    start = table_start + find_data_start(lines[table_start:], header_predicate)

    rows: list[Row] = []
    dropped = 0
    for idx in range(start, len(lines)):
        line = lines[idx].strip()
        if not line or is_separator_line(line):
            continue

        row = assemble_row(tokenize_line(line), schema)
        if row is None:
            dropped += 1
            continue
        rows.append(row)

    logger.debug(
        "Normalized reply: %d lines, header skip=%d, %d rows, %d short lines dropped (schema %s)",
        len(lines),
        start,
        len(rows),
        dropped,
        schema.version,
    )
    return NormalizedReply(canonical_text=canonical, rows=rows)


def main():
    """Normalize a saved model reply and print the tab-separated export."""
    parser = argparse.ArgumentParser(description="Normalize a model reply into a tab-separated table")
    parser.add_argument("path", nargs="?", help="File containing the raw reply (default: stdin)")
    parser.add_argument(
        "--schema",
        choices=sorted(SCHEMAS),
        default=DEFAULT_SCHEMA_VERSION,
        help=f"Row schema version (default: {DEFAULT_SCHEMA_VERSION})",
    )
    parser.add_argument("--no-index", action="store_true", help="Omit the leading row-number column")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.path:
        with open(args.path, "r", encoding="utf-8") as fopen:
            raw = fopen.read()
    else:
        raw = sys.stdin.read()

    schema = get_schema(args.schema)
    result = normalize(raw, schema)
    logger.info("Parsed %d rows from %d chars of reply", result.row_count, len(raw))
    print(export_tsv(result.rows, include_index=not args.no_index, schema=schema))


if __name__ == "__main__":
    main()
