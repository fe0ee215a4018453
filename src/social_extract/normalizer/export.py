"""Tab-separated export of normalized rows for pasting into a spreadsheet."""

import re
from collections.abc import Mapping, Sequence

from social_extract.normalizer.schema import Row, RowSchema, get_schema

# Column labels shown to the user; callers may rename any of them
DEFAULT_HEADER_LABELS = {
    "username": "Username",
    "link": "Link",
    "followers_display": "Followers",
    "views_display": "Views",
    "content_type": "Type",
    "tags_or_niche": "Tags",
    "region_or_language": "Region",
    "gender_distribution": "Gender Split",
    "age_distribution": "Age Dist.",
}

# Tabs and line breaks inside a cell would break the grid when pasted
_CELL_BREAK_RE = re.compile(r"[\t\r\n]+")


def _clean_cell(value: str) -> str:
    return _CELL_BREAK_RE.sub(" ", value)


def resolve_header_labels(schema: RowSchema, header_labels: Mapping[str, str] | Sequence[str] | None = None) -> list[str]:
    """Return one label per schema column, applying user renames on top of the defaults.

    *header_labels* may be a mapping of field name to label (partial renames
    allowed) or a sequence with exactly one label per schema column.
    """
    fields = schema.field_names
    if header_labels is None:
        return [DEFAULT_HEADER_LABELS.get(f, f) for f in fields]
    if isinstance(header_labels, Mapping):
        return [header_labels.get(f) or DEFAULT_HEADER_LABELS.get(f, f) for f in fields]
    if isinstance(header_labels, str):
        raise ValueError("Header labels must be a mapping or a sequence of labels, not a single string")
    labels = list(header_labels)
    if len(labels) != len(fields):
        raise ValueError(f"Expected {len(fields)} header labels for schema {schema.version}, got {len(labels)}")
    return labels


def export_tsv(
    rows: Sequence[Row],
    header_labels: Mapping[str, str] | Sequence[str] | None = None,
    *,
    include_index: bool = True,
    index_label: str = "#",
    schema: RowSchema | None = None,
) -> str:
    """Render *rows* as a tab-separated block: one header line, then one line per row.

    When *include_index* is set, a 1-based row number (position in *rows*,
    not any source value) is prepended to every line.
    """
    schema = schema or get_schema()
    header = [_clean_cell(label) for label in resolve_header_labels(schema, header_labels)]
    if include_index:
        header.insert(0, _clean_cell(index_label))

    lines = ["\t".join(header)]
    for position, row in enumerate(rows):
        cells = [_clean_cell(str(getattr(row, f))) for f in schema.field_names]
        if include_index:
            cells.insert(0, str(position + 1))
        lines.append("\t".join(cells))
    return "\n".join(lines)
