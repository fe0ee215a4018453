"""Compiled regex patterns and constant tuples for reply normalization.

These patterns identify the structural elements a model reply tends to
contain: markdown code fences, pipe-table dividers, header rows, and
human-formatted counts.  Used by classifiers.py, extraction.py and metrics.py.
"""

import re

# ─── Block Patterns ───────────────────────────────────────────────────────────

# Fenced block with no language tag or a tabular/text one, e.g. "```tsv\n...```".
# The interior is captured lazily so the first closing fence ends the block.
CODE_FENCE_RE = re.compile(r"```(?:tsv|csv|plaintext|text|markdown)?\n(.*?)```", re.IGNORECASE | re.DOTALL)


# ─── Line Markers ─────────────────────────────────────────────────────────────

PIPE = "|"
TAB = "\t"

# Markdown table divider, e.g. "|---|---|"
SEPARATOR_MARKER = "---"

# A whole line of divider cells, optionally aligned: "| --- | :---: |"
DIVIDER_ROW_RE = re.compile(r"\|?\s*:?-{3,}:?\s*(?:\|\s*:?-{3,}:?\s*)*\|?")

# Case-folded tokens that identify the first line as a header row
HEADER_TOKENS = (
    "username",
    "用户名",
    SEPARATOR_MARKER,
)


# ─── Metric Patterns ──────────────────────────────────────────────────────────

# Unsigned decimal literal at the start of a string: "12", "12.3", "12.", ".5"
NUMERIC_PREFIX_RE = re.compile(r"^(?:\d+(?:\.\d*)?|\.\d+)")

# Trailing unit suffixes (case-folded) and their multipliers
METRIC_MULTIPLIERS = {
    "万": 10_000,
    "k": 1_000,
    "m": 1_000_000,
}

# Thousands separator stripped before parsing
THOUSANDS_SEPARATOR = ","
