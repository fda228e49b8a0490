"""
Saju-based Korean baby-name recommendation engine.

Computes the four pillars from a birth date/time, works out which of the
five elements a name should supply, and ranks two-character hanja names.
"""

from jakmyeong.bazi import compute_chart, analyze_structure, luck_pillars
from jakmyeong.errors import InvalidInputError
from jakmyeong.needs import resolve_needs
from jakmyeong.recommend import rank, hanja_by_reading
from jakmyeong.scoring import ScoringConfig, score_name

__all__ = [
    "InvalidInputError",
    "ScoringConfig",
    "analyze_structure",
    "compute_chart",
    "hanja_by_reading",
    "luck_pillars",
    "rank",
    "resolve_needs",
    "score_name",
]
