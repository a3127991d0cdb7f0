"""Regex based sentence tokenizer.

A sentence is split into word runs (ASCII letters and apostrophes) and
punctuation runs (any other non-whitespace characters). Whitespace only
separates tokens. Digits fall in the punctuation class: ``"3 cats"`` yields
``"3"`` as punctuation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from lexibox.models.sentence_model import TokenType

_TOKEN_PATTERN = re.compile(r"(?P<word>[A-Za-z']+)|(?P<punctuation>[^A-Za-z'\s]+)")


@dataclass(frozen=True, slots=True)
class Token:
    position: int
    text: str
    type: TokenType

    def as_dict(self) -> dict[str, Any]:
        return {"position": self.position, "text": self.text, "type": self.type.value}


def tokenize(text: Any) -> list[Token]:
    """Split *text* into ordered word/punctuation tokens.

    Anything that is not a non-empty string yields an empty list.
    """

    if not text or not isinstance(text, str):
        return []

    return [
        Token(
            position=position,
            text=match.group(0),
            type=TokenType.WORD if match.lastgroup == "word" else TokenType.PUNCTUATION,
        )
        for position, match in enumerate(_TOKEN_PATTERN.finditer(text))
    ]
