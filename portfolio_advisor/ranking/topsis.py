"""
TOPSIS (Technique for Order of Preference by Similarity to Ideal Solution).

Inputs are already normalized benefit criteria in [0, 1], so the decision
matrix is weighted directly without vector normalization.
"""

import logging
from typing import List, Sequence

import numpy as np

logger = logging.getLogger(__name__)


def closeness_coefficients(matrix: Sequence[Sequence[float]], weights: Sequence[float]) -> List[float]:
    """
    Closeness to the ideal solution for each row of ``matrix``.

    Args:
        matrix: One row per alternative, one column per criterion
        weights: One weight per criterion

    Returns:
        Scores in [0, 1], same order as the rows. A single alternative
        scores 1.0; an alternative at distance 0 from both ideals scores 0.5.
    """
    if len(matrix) == 0:
        return []
    if len(matrix) == 1:
        return [1.0]

    weighted = np.asarray(matrix, dtype=float) * np.asarray(weights, dtype=float)

    ideal_best = weighted.max(axis=0)
    ideal_worst = weighted.min(axis=0)

    d_best = np.sqrt(((weighted - ideal_best) ** 2).sum(axis=1))
    d_worst = np.sqrt(((weighted - ideal_worst) ** 2).sum(axis=1))

    total = d_best + d_worst
    scores = np.full(len(matrix), 0.5)
    np.divide(d_worst, total, out=scores, where=total > 0)

    return [float(np.clip(s, 0.0, 1.0)) for s in scores]


def rank_order(scores: Sequence[float]) -> List[int]:
    """Indices by descending score; equal scores keep input order."""
    return [int(i) for i in np.argsort(-np.asarray(scores, dtype=float), kind="stable")]
