"""
Word Diff Adapter - Word-level diff tokens between two texts
"""

from __future__ import annotations

import re
from difflib import SequenceMatcher

from diffcommit_backend.models.diff import DiffToken

# Word runs, whitespace runs, or a single punctuation character
TOKEN_PATTERN = re.compile(r"\w+|\s+|[^\w\s]")


def tokenize(text: str) -> list[str]:
    """Split text into tokens that concatenate back to the original"""
    return TOKEN_PATTERN.findall(text)


class WordDiffAdapter:
    """Generate ordered word-level diff tokens"""

    def diff(self, source: str, target: str) -> list[DiffToken]:
        """Diff source against target, removed tokens before added ones"""
        source_tokens = tokenize(source)
        target_tokens = tokenize(target)

        matcher = SequenceMatcher(None, source_tokens, target_tokens, autojunk=False)
        tokens: list[DiffToken] = []

        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                tokens.append(DiffToken(value="".join(source_tokens[i1:i2])))
                continue

            # "replace" yields both sides, removal first
            if tag in ("delete", "replace"):
                tokens.append(DiffToken(value="".join(source_tokens[i1:i2]), removed=True))
            if tag in ("insert", "replace"):
                tokens.append(DiffToken(value="".join(target_tokens[j1:j2]), added=True))

        return tokens


def diff_words(source: str, target: str) -> list[DiffToken]:
    """Convenience function for a one-off word diff"""
    return WordDiffAdapter().diff(source, target)
