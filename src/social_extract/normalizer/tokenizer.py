"""Split a single data line into trimmed cell values."""

from social_extract.normalizer.patterns import PIPE, TAB


def tokenize_line(line: str) -> list[str]:
    """Split *line* into cells, left to right.

    Pipe-table lines lose exactly one leading and one trailing pipe before
    being split on the interior pipes; anything else is split on tabs.
    Empty cells (including trailing ones) are kept as empty strings.
    """
    if PIPE in line:
        if line.startswith(PIPE):
            line = line[1:]
        if line.endswith(PIPE):
            line = line[:-1]
        return [cell.strip() for cell in line.split(PIPE)]
    return [cell.strip() for cell in line.split(TAB)]
