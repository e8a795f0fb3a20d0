"""
Normalization and tokenization of pasted or typed product descriptions.

Product lines are messy: "Dolcontin depottab 10mg 100 stk (blister)" and
"DOLCONTIN 10 MG" must end up comparable. The pipeline is deterministic and
keeps decimals intact, so "0,4" and "0.4" compare equal.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from omeq.utils.constants import NOISE_TOKENS

# Comma used as decimal separator between two digits
_DECIMAL_COMMA = re.compile(r"(\d),(\d)")
# Digit-letter and letter-digit boundaries (e.g. "30mg" -> "30 mg")
_DIGIT_LETTER = re.compile(r"(\d)([^\W\d_])")
_LETTER_DIGIT = re.compile(r"([^\W\d_])(\d)")
# Punctuation treated as whitespace. The period is kept for decimals.
_PUNCTUATION = re.compile(r"[µμ,;:()\[\]{}/\\|+\-_*\"'!?]")
_WHITESPACE = re.compile(r"\s+")

NUMERIC_TOKEN = re.compile(r"\d+(?:\.\d+)?")


def normalize(text: str) -> str:
    """
    Canonicalize a product description for matching.

    Returns the lowercase, punctuation-free string with single spaces, or
    `""` for empty input.
    """
    if not text:
        return ""

    value = text.lower()
    value = _DECIMAL_COMMA.sub(r"\1.\2", value)
    value = _DIGIT_LETTER.sub(r"\1 \2", value)
    value = _LETTER_DIGIT.sub(r"\1 \2", value)
    value = _PUNCTUATION.sub(" ", value)
    return _WHITESPACE.sub(" ", value).strip()


def is_numeric_token(token: str) -> bool:
    return NUMERIC_TOKEN.fullmatch(token) is not None


def _keep_token(token: str) -> bool:
    if token in NOISE_TOKENS:
        return False
    # Short tokens carry no information unless they are numbers
    return len(token) >= 2 or is_numeric_token(token)


def tokenize(text: str) -> list[str]:
    """
    Split text into matchable tokens.

    Noise words are dropped and immediately repeated tokens are collapsed.
    Repetitions elsewhere are kept, as they still count for scoring.
    """
    tokens: list[str] = []
    for token in normalize(text).split(" "):
        if not token or not _keep_token(token):
            continue
        if tokens and tokens[-1] == token:
            continue
        tokens.append(token)
    return tokens


def token_matches(candidate_tokens: Sequence[str], token: str) -> bool:
    """
    Check a single query token against the tokens of a candidate.

    Numbers must match exactly, so "40" never matches "400". Text matches as
    a prefix, so "xirom" matches "xiromed".
    """
    needle = token.replace(",", ".")
    if is_numeric_token(needle):
        return needle in candidate_tokens
    return any(candidate.startswith(needle) for candidate in candidate_tokens)
