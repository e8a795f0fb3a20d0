"""
Ranking of catalog options against a partial or pasted query, for
interactive suggestions and for free text resolution.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import NamedTuple

from omeq.catalog.index import CatalogIndex, CatalogOption
from omeq.text.normalizer import (
    is_numeric_token,
    normalize,
    token_matches,
    tokenize,
)
from omeq.utils.constants import (
    DEFAULT_MAX_RESULTS,
    MAX_REQUIRED_TEXT_TOKENS,
    MEANINGFUL_TOKEN_MIN_LENGTH,
    NUMERIC_TOKEN_SCORE,
    REQUIRED_TOKEN_SCORE,
    TEXT_TOKEN_SCORE,
    UNIT_TOKENS,
    WHOLE_QUERY_MIN_LENGTH,
    WHOLE_QUERY_SCORE,
)
from omeq.utils.utils import norwegian_sort_key

# Product code typed digit by digit, optionally zero padded
PRODUCT_CODE_QUERY = re.compile(r"0*(\d+)")
_DECIMAL_TOKEN = re.compile(r"\d+\.\d+")


class QueryTerms(NamedTuple):
    """
    Tokens of a free text query, split by the role they play in ranking.

    Up to two meaningful text tokens (typically substance and brand or
    manufacturer) and the strength number are required: candidates that
    fail them are excluded before scoring.
    """

    tokens: list[str]
    normalized: str
    required_text: list[str]
    required_strength: list[str]

    @classmethod
    def from_query(cls, query: str) -> QueryTerms:
        tokens = tokenize(query)

        text_tokens = [
            t for t in tokens if not is_numeric_token(t) and t not in UNIT_TOKENS
        ]
        # Short tokens are usually partials still being typed
        meaningful = [
            t for t in text_tokens if len(t) >= MEANINGFUL_TOKEN_MIN_LENGTH
        ]

        strength_token = _number_with_unit(tokens) or next(
            (t for t in tokens if _DECIMAL_TOKEN.fullmatch(t)), None
        )

        return cls(
            tokens=tokens,
            normalized=normalize(query),
            required_text=meaningful[:MAX_REQUIRED_TEXT_TOKENS],
            required_strength=[strength_token] if strength_token else [],
        )


def _number_with_unit(tokens: Sequence[str]) -> str | None:
    """Number of the first number-unit pair, like "75 mg" or "1.25 ml"."""
    for number, unit in zip(tokens, tokens[1:]):
        if is_numeric_token(number) and unit in UNIT_TOKENS:
            return number
    return None


def score_option(terms: QueryTerms, option: CatalogOption) -> int | None:
    """
    Score a single option, or None if it fails a required token.

    Required tokens match by token prefix (numbers exactly), so "romed"
    does not match "xiromed". Scoring itself also counts plain containment.
    """
    required = terms.required_text + terms.required_strength
    if not all(token_matches(option.tokens, t) for t in required):
        return None

    score = 0
    for token in terms.tokens:
        if token in option.normalized:
            score += TEXT_TOKEN_SCORE
        if is_numeric_token(token) and token in option.tokens:
            score += NUMERIC_TOKEN_SCORE

    # Required tokens are all satisfied at this point
    score += REQUIRED_TOKEN_SCORE * len(terms.required_text)
    score += REQUIRED_TOKEN_SCORE * len(terms.required_strength)

    # Reward pasting a whole product line
    if (
        len(terms.normalized) >= WHOLE_QUERY_MIN_LENGTH
        and terms.normalized in option.normalized
    ):
        score += WHOLE_QUERY_SCORE

    return score


def score_options(
    query: str, options: Sequence[CatalogOption]
) -> list[tuple[CatalogOption, int]]:
    """
    Score every option against a free text query. Returns the surviving
    options by descending score, ties in catalog input order.
    """
    terms = QueryTerms.from_query(query)
    if not terms.tokens:
        return []

    scored: list[tuple[CatalogOption, int]] = []
    for option in options:
        score = score_option(terms, option)
        if score is not None:
            scored.append((option, score))

    scored.sort(key=lambda pair: (-pair[1], pair[0].position))
    return scored


def _rank_by_code(
    prefix: str, index: CatalogIndex, max_results: int
) -> list[CatalogOption]:
    matches = [
        option
        for option in index.options
        if option.code is not None and option.code.startswith(prefix)
    ]

    if not matches:
        # Data mismatch between options and the code map
        label = index.canonical_label(prefix)
        return [o for o in index.options if o.label == label][:max_results]

    # Exact code first, then shorter codes, then label order
    matches.sort(
        key=lambda o: (
            o.code != prefix,
            len(o.code or ""),
            norwegian_sort_key(o.label),
        )
    )
    return matches[:max_results]


def rank(
    query: str,
    index: CatalogIndex,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> list[CatalogOption]:
    """
    Ordered shortlist of catalog options for a query. Every option refers to
    its product through `option.product`.

    Digits-only queries are read as a product code prefix; anything else is
    scored as free text.
    """
    if max_results <= 0:
        return []

    stripped = (query or "").strip()
    if code := PRODUCT_CODE_QUERY.fullmatch(stripped):
        return _rank_by_code(code[1], index, max_results)

    return [
        option for option, _ in score_options(stripped, index.options)
    ][:max_results]


def rank_simple(
    query: str,
    index: CatalogIndex,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> list[CatalogOption]:
    """
    Minimal fallback ranking: labels starting with the query, then labels
    containing it. An empty query lists the first options.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return list(index.options[:max_results])

    starts = [o for o in index.options if o.label.lower().startswith(needle)]
    contains = [
        o
        for o in index.options
        if needle in o.label.lower() and not o.label.lower().startswith(needle)
    ]
    return [*starts, *contains][:max_results]
