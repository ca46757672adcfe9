"""
Word fixtures shared by the tree tests.

Provides:
- Word: a minimal Datum implementation (UTF-8 text)
- GREEK: 24 distinct words, supplied in a non-sorted order
- make_words: the first n Greek words as Word items
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Word:
    """A word that serializes to its UTF-8 bytes."""
    text: str

    def serialize(self) -> bytes:
        return self.text.encode("utf-8")


GREEK = [
    "alpha", "beta", "gamma", "delta", "epsilon", "zeta", "eta", "theta",
    "yota", "kappa", "lambda", "mi", "ni", "ksi", "omikron", "pi", "ro",
    "sigma", "taph", "ipsilon", "phi", "chi", "psi", "omega",
]


def make_words(n: int = len(GREEK)) -> list[Word]:
    """Return the first ``n`` Greek words as Word items, in supply order."""
    return [Word(text) for text in GREEK[:n]]
