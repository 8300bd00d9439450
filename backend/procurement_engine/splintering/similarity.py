"""Pure string similarity functions — no I/O, easy to unit test."""

import math


def _normalize(text: str | None) -> str:
    return (text or "").lower().strip()


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit cost for insert, delete and substitute."""
    rows = len(b) + 1
    cols = len(a) + 1
    matrix = [[0] * cols for _ in range(rows)]

    for i in range(cols):
        matrix[0][i] = i
    for j in range(rows):
        matrix[j][0] = j

    for j in range(1, rows):
        for i in range(1, cols):
            indicator = 0 if a[i - 1] == b[j - 1] else 1
            matrix[j][i] = min(
                matrix[j][i - 1] + 1,
                matrix[j - 1][i] + 1,
                matrix[j - 1][i - 1] + indicator,
            )

    return matrix[rows - 1][cols - 1]


def similarity(a: str | None, b: str | None) -> int:
    """Score two strings from 0 (nothing shared) to 100 (identical).

    Comparison ignores case and surrounding whitespace. Two empty strings
    score 100.
    """
    s1 = _normalize(a)
    s2 = _normalize(b)

    if s1 == s2:
        return 100

    max_length = max(len(s1), len(s2))
    distance = edit_distance(s1, s2)
    # half-up rounding
    return math.floor((max_length - distance) / max_length * 100 + 0.5)
