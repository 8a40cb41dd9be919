"""Free-text search: tokenizing, scoring and highlighting."""

import re
from typing import Any, Dict, List, Optional, Tuple

from ..models.list_page import SearchMetrics, SearchResult
from .schema import get_field_value


TOKEN_TRIM_CHARS = ".,!?;:"
HIGHLIGHT_CONTEXT = 50

TOKEN_MATCH_SCORE = 1.0
EARLINESS_BONUS = 0.5
EXACT_MATCH_BONUS = 1.0

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to",
    "for", "of", "with", "by", "is", "are", "was", "were", "be", "been",
})
MIN_TOP_TERM_LENGTH = 3


def tokenize(query: str) -> List[str]:
    """Split a query on whitespace into distinct search tokens.

    Tokens are trimmed of surrounding punctuation; empty tokens and
    case-insensitive duplicates are dropped.
    """
    tokens = []
    seen = set()
    for raw in query.split():
        token = raw.strip(TOKEN_TRIM_CHARS)
        if not token:
            continue
        key = token.lower()
        if key in seen:
            continue
        seen.add(key)
        tokens.append(token)
    return tokens


def find_token(text: str, token: str) -> Optional[Tuple[int, int]]:
    """Case-insensitive substring search returning the (start, end) span."""
    match = re.search(re.escape(token), text, re.IGNORECASE)
    if match is None:
        return None
    return match.span()


def highlight(text: str, start: int, end: int, context: int = HIGHLIGHT_CONTEXT) -> str:
    """Wrap ``text[start:end]`` in <mark> tags with surrounding context."""
    prefix = text[max(0, start - context):start]
    suffix = text[end:end + context]
    return f"{prefix}<mark>{text[start:end]}</mark>{suffix}"


def score_field(text: str, search) -> Tuple[float, Optional[Tuple[int, int]]]:
    """Score one field's text against a compiled search.

    Each matched token scores 1.0 plus up to 0.5 for matching near the start
    of the text; the whole query equal to the field text adds 1.0.

    Returns:
        (score, span of the first matched token); the span is None when no
        token matched
    """
    score = 0.0
    first_span = None
    length = len(text)

    for token in search.tokens:
        span = find_token(text, token)
        if span is None:
            continue
        earliness = 1.0 - (span[0] / length)
        score += TOKEN_MATCH_SCORE + EARLINESS_BONUS * earliness
        if first_span is None:
            first_span = span

    if first_span is not None and text.strip().lower() == search.query.lower():
        score += EXACT_MATCH_BONUS

    return score, first_span


def score_item(
    item: Any,
    search,
    field_match_counts: Optional[Dict[str, int]] = None
) -> Optional[SearchResult]:
    """Score an item against a compiled search.

    Args:
        item: Raw record (mapping or attribute object)
        search: ``CompiledSearch`` from the query compiler
        field_match_counts: When given, incremented once per matched field

    Returns:
        SearchResult when any token occurs in any searched field, else None
    """
    matched = False
    total = 0.0
    highlights = []

    for spec in search.fields:
        value = get_field_value(item, spec.name)
        if value is None:
            continue
        text = str(value)
        if not text:
            continue

        score, span = score_field(text, search)
        if span is None:
            continue

        matched = True
        total += score * search.weight(spec.name)
        if field_match_counts is not None:
            field_match_counts[spec.name] = field_match_counts.get(spec.name, 0) + 1
        if search.highlight:
            highlights.append(highlight(text, span[0], span[1]))

    if not matched:
        return None

    return SearchResult(score=total, highlights=highlights)


def extract_top_terms(query: str) -> List[str]:
    """Significant terms of a query, in query order.

    Stop words and terms shorter than three characters are dropped.
    """
    return [
        token for token in tokenize(query)
        if len(token) >= MIN_TOP_TERM_LENGTH and token.lower() not in STOP_WORDS
    ]


def build_search_metrics(search, total_results: int, field_match_counts: Dict[str, int]) -> SearchMetrics:
    """Search metrics for a page; query time is filled in by the caller."""
    return SearchMetrics(
        total_results=total_results,
        top_terms=extract_top_terms(search.query),
        field_match_counts=dict(field_match_counts),
    )
