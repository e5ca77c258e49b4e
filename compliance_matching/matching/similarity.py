"""
String similarity used by title matching and duplicate clustering.
"""

from __future__ import annotations


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character insertions, deletions and
    substitutions turning ``a`` into ``b``."""
    rows, cols = len(a) + 1, len(b) + 1
    table = [[0] * cols for _ in range(rows)]

    for i in range(rows):
        table[i][0] = i
    for j in range(cols):
        table[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            table[i][j] = min(
                table[i - 1][j] + 1,        # deletion
                table[i][j - 1] + 1,        # insertion
                table[i - 1][j - 1] + cost,  # substitution
            )

    return table[rows - 1][cols - 1]


def similarity(a: str, b: str) -> float:
    """Edit-distance similarity in [0, 1]; 1.0 for identical strings."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / longest


def token_overlap(a: str, b: str, min_length: int = 3) -> float:
    """Shared words (longer than two characters) over the smaller word set."""
    words_a = {w for w in a.split() if len(w) >= min_length}
    words_b = {w for w in b.split() if len(w) >= min_length}
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / min(len(words_a), len(words_b))
