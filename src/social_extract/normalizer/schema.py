"""Pydantic models for normalized rows and their versioned positional schemas.

A model reply carries no reliable column names, so cells are mapped to row
fields purely by position.  The positional map, the per-field defaults and
the minimum column count a line needs to be accepted are bundled into a
``RowSchema`` so the assembler stays the same across schema versions.

Two versions are registered:

  v1  -- eight columns, ending at the gender split.  Accepts any line with at
         least two cells (the relaxed gate used while the prompt was still
         settling).
  v2  -- nine columns, adds the age distribution.  Requires four cells so
         that stray prose containing a single tab or pipe is not mistaken for
         a row.  This is the default.
"""

from pydantic import BaseModel, ConfigDict, model_validator

# Generic content-type label used when the model leaves the column blank
CONTENT_TYPE_LABELS = {
    "zh": "图文",
    "en": "Post",
}
DEFAULT_LOCALE = "zh"

DEFAULT_SCHEMA_VERSION = "v2"


class Row(BaseModel):
    """One normalized record extracted from a single line of the reply."""

    model_config = ConfigDict(frozen=True)

    username: str = "N/A"
    link: str = ""
    followers_display: str = ""
    views_display: str = "0"
    views_numeric: float = 0.0
    content_type: str = CONTENT_TYPE_LABELS[DEFAULT_LOCALE]
    tags_or_niche: str = ""
    region_or_language: str = ""
    gender_distribution: str = "N/A"
    age_distribution: str = "N/A"


# Fields that can be filled from a cell (everything except the derived count)
CELL_FIELDS = tuple(name for name in Row.model_fields if name != "views_numeric")


class ColumnSpec(BaseModel):
    """Target field for one cell position and the value used when the cell is empty or missing."""

    model_config = ConfigDict(frozen=True)

    field: str
    default: str = ""


class RowSchema(BaseModel):
    """A versioned positional mapping from cells to Row fields."""

    model_config = ConfigDict(frozen=True)

    version: str
    columns: tuple[ColumnSpec, ...]
    min_columns: int

    @model_validator(mode="after")
    def validate_columns(self) -> "RowSchema":
        """Ensure every column targets a known, distinct Row field and the gate is reachable."""
        fields = [col.field for col in self.columns]
        unknown = [f for f in fields if f not in CELL_FIELDS]
        if unknown:
            raise ValueError(f"Unknown row fields in schema {self.version}: {unknown}")
        if len(set(fields)) != len(fields):
            raise ValueError(f"Duplicate row fields in schema {self.version}")
        if not 1 <= self.min_columns <= len(self.columns):
            raise ValueError(f"min_columns must be between 1 and {len(self.columns)}, got {self.min_columns}")
        return self

    @property
    def field_names(self) -> tuple[str, ...]:
        """Mapped field names in positional order."""
        return tuple(col.field for col in self.columns)

    def with_default(self, field: str, default: str) -> "RowSchema":
        """Return a copy of the schema with one column's default replaced."""
        columns = tuple(ColumnSpec(field=col.field, default=default) if col.field == field else col for col in self.columns)
        return self.model_copy(update={"columns": columns})


_BASE_COLUMNS = (
    ColumnSpec(field="username", default="N/A"),
    ColumnSpec(field="link"),
    ColumnSpec(field="followers_display"),
    ColumnSpec(field="views_display", default="0"),
    ColumnSpec(field="content_type", default=CONTENT_TYPE_LABELS[DEFAULT_LOCALE]),
    ColumnSpec(field="tags_or_niche"),
    ColumnSpec(field="region_or_language"),
    ColumnSpec(field="gender_distribution", default="N/A"),
)

SCHEMAS: dict[str, RowSchema] = {
    "v1": RowSchema(version="v1", columns=_BASE_COLUMNS, min_columns=2),
    "v2": RowSchema(
        version="v2",
        columns=_BASE_COLUMNS + (ColumnSpec(field="age_distribution", default="N/A"),),
        min_columns=4,
    ),
}


def get_schema(version: str = DEFAULT_SCHEMA_VERSION, locale: str = DEFAULT_LOCALE) -> RowSchema:
    """Return the registered schema for *version* with the content-type default localized.

    Unknown locales fall back to the default locale.  Unknown versions raise
    KeyError listing the registered ones.
    """
    if version not in SCHEMAS:
        raise KeyError(f"Unknown schema version {version!r}; known versions: {sorted(SCHEMAS)}")
    label = CONTENT_TYPE_LABELS.get(locale, CONTENT_TYPE_LABELS[DEFAULT_LOCALE])
    return SCHEMAS[version].with_default("content_type", label)
