"""Line classification helpers for reply normalization.

Each function takes one line of text and returns True/False to classify it
as a header row, a markdown separator, or a table-like line.  The header
check is the default header predicate of the pipeline; callers can swap in
any ``Callable[[str], bool]`` when the model's phrasing drifts.
"""

from collections.abc import Callable, Iterable, Sequence

from social_extract.normalizer.patterns import DIVIDER_ROW_RE, HEADER_TOKENS, PIPE, SEPARATOR_MARKER, TAB

HeaderPredicate = Callable[[str], bool]


def is_header_line(line: str, tokens: Iterable[str] = HEADER_TOKENS) -> bool:
    """Return True if the case-folded line contains any header-identifying token."""
    folded = line.casefold()
    return any(token.casefold() in folded for token in tokens)


def make_header_predicate(extra_tokens: Iterable[str]) -> HeaderPredicate:
    """Build a header predicate that also recognises *extra_tokens* (e.g. localized column names)."""
    tokens = tuple(HEADER_TOKENS) + tuple(extra_tokens)

    def _predicate(line: str) -> bool:
        return is_header_line(line, tokens)

    return _predicate


def is_separator_line(line: str) -> bool:
    """Return True for decorative divider lines such as ``|---|---|``."""
    return SEPARATOR_MARKER in line.strip()


def is_markdown_divider(line: str) -> bool:
    """Return True for a complete markdown divider row such as ``|---|:--:|``."""
    return DIVIDER_ROW_RE.fullmatch(line.strip()) is not None


def is_table_like(line: str) -> bool:
    """Return True if the line contains a tab or a pipe character."""
    return TAB in line or PIPE in line


def find_data_start(lines: Sequence[str], header_predicate: HeaderPredicate = is_header_line) -> int:
    """Return how many leading lines are header/decoration rather than data (0, 1 or 2).

    Only line content is inspected, never column counts.  A recognised header
    skips one line, and a ``---`` divider directly under it skips a second.
    A pipe row the predicate does not recognise still counts as a header when
    a full markdown divider row sits underneath it.
    """
    if not lines:
        return 0
    second = lines[1] if len(lines) > 1 else ""
    if header_predicate(lines[0]):
        return 2 if SEPARATOR_MARKER in second else 1
    if PIPE in lines[0] and is_markdown_divider(second):
        return 2
    return 0


def first_table_line(lines: Sequence[str]) -> int:
    """Return the index of the first table-like line, or 0 when there is none."""
    for idx, line in enumerate(lines):
        if is_table_like(line):
            return idx
    return 0
