"""Derivation of safe identifiers from display labels."""
from typing import List, Optional
import re

# Runs of letters and digits in any script; everything else separates words
WORD_RUN = re.compile(r'[^\W_]+')


def _is_boundary(prev: str, char: str, following: str) -> bool:
    if char.isdigit() != prev.isdigit():
        return True
    if char.isupper() and prev.islower():
        return True
    # Last capital of an acronym starts the next word: "XMLHttp" -> "XML", "Http"
    return char.isupper() and prev.isupper() and following.islower()


def split_words(label: str) -> List[str]:
    """Split a label on separators and case/digit transitions."""
    words = []
    for run in WORD_RUN.findall(label):
        start = 0
        for i in range(1, len(run)):
            following = run[i + 1] if i + 1 < len(run) else ""
            if _is_boundary(run[i - 1], run[i], following):
                words.append(run[start:i])
                start = i
        words.append(run[start:])
    return words


def to_class_name(label: Optional[str]) -> str:
    """
    Convert a label into a lowercase, underscore-separated identifier.

    "foo/bar/baz" -> "foo_bar_baz", "FOOBAR" -> "foobar", "FooBar" -> "foo_bar".
    Letters of any script are kept ("Straße" -> "straße").
    """
    if not label:
        return ""
    return "_".join(word.lower() for word in split_words(label))
