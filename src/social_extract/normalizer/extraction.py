"""Content-block extraction: isolate the table from a prose-wrapped model reply.

The model is asked for a TSV table but frequently wraps it in a markdown code
fence, prefixes it with a sentence of prose, or answers with a pipe table.
Extraction is deliberately permissive: capturing extra prose is harmless
because the tokenizer drops lines with too few columns, while discarding a
real table is not recoverable.
"""

import logging

from social_extract.normalizer.classifiers import is_table_like
from social_extract.normalizer.patterns import CODE_FENCE_RE

logger = logging.getLogger(__name__)


def _fenced_block(raw: str) -> str | None:
    """Return the interior of the first tabular/text code fence, or None."""
    match = CODE_FENCE_RE.search(raw)
    return match.group(1) if match else None


def _table_suffix(raw: str) -> str | None:
    """Return everything from the first tab- or pipe-bearing line onwards, or None."""
    lines = raw.split("\n")
    for idx, line in enumerate(lines):
        if is_table_like(line):
            return "\n".join(lines[idx:])
    return None


def extract_canonical_text(raw: str) -> str:
    """Return the trimmed substring of *raw* judged to be the table.

    Tries a fenced block first, then the suffix starting at the first
    table-like line, and finally falls back to the whole reply.
    """
    content = _fenced_block(raw)
    if content is not None:
        logger.debug("Canonical text taken from fenced block (%d chars)", len(content))
        return content.strip()

    content = _table_suffix(raw)
    if content is not None:
        logger.debug("Canonical text taken from first table-like line (%d chars)", len(content))
        return content.strip()

    logger.debug("No table structure detected; using the whole reply")
    return raw.strip()
