from __future__ import annotations

import re
from enum import Enum
from typing import List, Union


class RegularExpressions:
    """Regular expression patterns for tokenization."""

    NON_WORD = r'\W+'
    NON_ALNUM = r'[^A-Za-z\u0400-\u04FF0-9_]+'


class TokenizerKind(str, Enum):
    """Tokenization strategies selectable by training options."""
    AGGRESSIVE = "aggressive"
    STANDARD = "standard"


class _SplitTokenizer:
    pattern: str = RegularExpressions.NON_WORD

    def __init__(self) -> None:
        self._split_pattern = re.compile(self.pattern)

    def tokenize(self, text: str) -> List[str]:
        if not text:
            return []
        return [t for t in self._split_pattern.split(text) if t]


class AggressiveTokenizer(_SplitTokenizer):
    """Splits on any run of non-word characters (Unicode aware)."""

    pattern = RegularExpressions.NON_WORD


class WordTokenizer(_SplitTokenizer):
    """Keeps Latin and Cyrillic letters, digits and underscores; everything else separates."""

    pattern = RegularExpressions.NON_ALNUM


def create_tokenizer(kind: Union[TokenizerKind, str]) -> _SplitTokenizer:
    """Build a tokenizer for ``kind`` ("aggressive" or "standard")."""
    try:
        kind = TokenizerKind(kind)
    except ValueError:
        raise ValueError(f"Unknown tokenizer kind: {kind!r}") from None
    if kind is TokenizerKind.AGGRESSIVE:
        return AggressiveTokenizer()
    return WordTokenizer()
