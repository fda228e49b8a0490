"""
Candidate generation and ranking.

Enumerates ordered character pairs from the dictionary, filters out pairs
that cannot be names under the given surname and preferences, scores the
rest and keeps the best `top_k`.
"""

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Union
import logging

from jakmyeong.bazi import Gender, Polarity
from jakmyeong.hanja import HanjaEntry, SurnameHanja
from jakmyeong.needs import ElementNeedProfile
from jakmyeong.scoring import (
    ScoredCandidate, ScoringConfig, ScoringContext, Surname, score_with_context,
)

logger = logging.getLogger(__name__)

__all__ = ["HanjaMatch", "hanja_by_reading", "rank"]


def _matches(entry: HanjaEntry, text: Optional[str]) -> bool:
    return bool(text) and (entry.reading == text or entry.character == text)


def _position(char1: HanjaEntry, char2: HanjaEntry,
              name1: Optional[str], name2: Optional[str]):
    """
    Put preferred characters in their slots.

    Returns the (possibly swapped) pair, or None when the pair cannot
    satisfy the preferences.
    """
    if name1:
        first, second = _matches(char1, name1), _matches(char2, name1)
        if first == second:
            return None
        if second:
            char1, char2 = char2, char1
    if name2:
        if not _matches(char2, name2) or _matches(char1, name2):
            return None
    return char1, char2


def rank(dictionary: Sequence[HanjaEntry], surname: Union[Surname, str],
         needs: ElementNeedProfile, gender: Union[Gender, str],
         birth_year: Optional[int] = None, birth_order: Optional[int] = None,
         name1: Optional[str] = None, name2: Optional[str] = None,
         config: Optional[ScoringConfig] = None,
         surname_hanja: Optional[Sequence[SurnameHanja]] = None,
         chart_polarity: Optional[Mapping[Polarity, int]] = None) -> list[ScoredCandidate]:
    """
    Rank two-character names for a surname, best first.

    Args:
        dictionary: hanja entries, in load order
        surname: Hangul reading (e.g. "김") or a literal glyph
        needs: elements to supply / avoid
        gender: "male"/"female" or a Gender
        birth_year: drives era-dependent criteria; None scores them neutrally
        birth_order: 1 for the eldest; enables the birth-order criterion
        name1, name2: preferred reading or glyph for the first / second slot
        config: scoring constants; defaults to ScoringConfig.create_default()
        surname_hanja: glyphs the surname may be written with; characters
            using any of them are excluded too
        chart_polarity: yang/yin stem counts of the chart; two same-polarity
            characters that offset a lopsided chart earn a small bonus

    Returns:
        At most `config.top_k` candidates. Ties on final score are broken by
        element match, ending sound, syllable flow, then distance of the
        stroke total from the ideal.
    """
    cfg = config or ScoringConfig.create_default()
    name1 = (name1 or "").strip() or None
    name2 = (name2 or "").strip() or None
    ctx = ScoringContext(
        surname=Surname.parse(surname),
        needs=needs,
        gender=Gender.parse(gender),
        birth_year=birth_year,
        birth_order=birth_order,
        config=cfg,
        chart_polarity=chart_polarity,
    )
    surname_glyphs = {s.character for s in surname_hanja or () if s.character}

    def usable(entry: HanjaEntry) -> bool:
        return (
            entry.is_valid
            and not ctx.surname.collides_with(entry)
            and entry.character not in surname_glyphs
        )

    pool = [e for e in dictionary if usable(e)]
    logger.debug("%d of %d dictionary entries usable with surname %s",
                 len(pool), len(dictionary), ctx.surname.display)

    candidates = []
    seen = set()
    for i, first in enumerate(pool):
        for j, second in enumerate(pool):
            if i == j or first.reading == second.reading:
                continue
            pair = _position(first, second, name1, name2)
            if pair is None:
                continue
            char1, char2 = pair

            key = (ctx.surname.display + char1.reading + char2.reading,
                   char1.character + char2.character)
            if key in seen:
                continue
            seen.add(key)
            candidates.append(score_with_context(char1, char2, ctx))

    candidates.sort(key=lambda c: _sort_key(c, cfg))
    top = candidates[:cfg.top_k]
    logger.info("Scored %d candidate names for %s, returning %d",
                len(candidates), ctx.surname.display, len(top))
    return top


def _sort_key(candidate: ScoredCandidate, config: ScoringConfig) -> tuple:
    deficient, ending, flow, stroke_distance = candidate.tie_break_keys(config.ideal_strokes)
    return (-candidate.final_score, -deficient, -ending, -flow, stroke_distance)


# ============================================================
# LOOKUP BY READING
# ============================================================

@dataclass(frozen=True)
class HanjaMatch:
    entry: HanjaEntry
    fit_score: int
    fit_reason: str

    def to_dict(self):
        return {
            "hanja": self.entry.to_dict(),
            "fit_score": self.fit_score,
            "fit_reason": self.fit_reason,
        }


def hanja_by_reading(dictionary: Sequence[HanjaEntry], text: str,
                     required_elements=()) -> list[HanjaMatch]:
    """
    All characters read (or written) as `text`, those supplying a required
    element first. Used when siblings share a character and only the glyph
    is still open.
    """
    text = (text or "").strip()
    if not text:
        return []

    matched = []
    for entry in dictionary:
        if not entry.character or not _matches(entry, text):
            continue
        element = entry.primary_element
        if element in required_elements:
            matched.append(HanjaMatch(entry, 1, f"{element.hangul} 기운 보완에 좋음"))
        else:
            matched.append(HanjaMatch(entry, 0, f"{element.hangul} 오행"))

    matched.sort(key=lambda m: -m.fit_score)
    return matched
