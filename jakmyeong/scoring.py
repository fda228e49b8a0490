"""
Name scoring.

Every criterion is a pure function `(char1, char2, context) -> float`
clamped to [0, 5]. The final score is the weighted mean of the criteria,
so weights can be tuned in `ScoringConfig` without touching the rules.
"""

from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Union

from jakmyeong.bazi import Gender, Polarity
from jakmyeong.hangul import (
    ERA_FIRST_SYLLABLE, NEUTRAL_SCORE, SOFT_ONSETS, STRONG_ONSETS,
    Era, decompose, era_affinity, era_fit, era_for_year, is_hangul_syllable, maleum_fit,
)
from jakmyeong.hanja import GenderAffinity, HanjaEntry
from jakmyeong.needs import ElementNeedProfile

MAX_SCORE = 5.0


class Criterion(Enum):
    ELEMENT = "element"
    ENDING_SOUND = "ending_sound"
    SYLLABLE_FLOW = "syllable_flow"
    ERA_PHONOLOGY = "era_phonology"
    GENDER = "gender"
    HARMONY = "harmony"
    BIRTH_ORDER = "birth_order"


# ============================================================
# CONFIGURATION
# ============================================================

@dataclass(frozen=True)
class ScoringConfig:
    """Immutable scoring constants: criterion weights, stroke bands, result size."""

    weights: Mapping[Criterion, float]
    top_k: int
    ideal_strokes: int
    preferred_strokes: tuple
    sweet_strokes: tuple
    acceptable_strokes: tuple
    decimals: int

    @classmethod
    def create_default(cls) -> "ScoringConfig":
        return cls(
            weights=MappingProxyType({
                Criterion.ELEMENT: 1.8,
                Criterion.ENDING_SOUND: 1.5,
                Criterion.SYLLABLE_FLOW: 1.3,
                Criterion.ERA_PHONOLOGY: 1.1,
                Criterion.GENDER: 1.0,
                Criterion.HARMONY: 0.5,
                Criterion.BIRTH_ORDER: 0.3,
            }),
            top_k=8,
            ideal_strokes=23,
            preferred_strokes=(18, 28),
            sweet_strokes=(21, 25),
            acceptable_strokes=(12, 35),
            decimals=3,
        )

    def with_weights(self, **weights: float) -> "ScoringConfig":
        """Copy with some weights replaced, keyed by criterion value (e.g. element=2.0)."""
        merged = dict(self.weights)
        for name, weight in weights.items():
            merged[Criterion(name)] = float(weight)
        return replace(self, weights=MappingProxyType(merged))

    def with_top_k(self, top_k: int) -> "ScoringConfig":
        return replace(self, top_k=top_k)


_DEFAULT_CONFIG = ScoringConfig.create_default()


# ============================================================
# INPUT TYPES
# ============================================================

@dataclass(frozen=True)
class Surname:
    reading: str
    character: str = ""

    @classmethod
    def parse(cls, value: Union["Surname", str]) -> "Surname":
        """A Hangul string is a reading, anything else a literal glyph."""
        if isinstance(value, Surname):
            return value
        text = (value or "").strip()
        if text and all(is_hangul_syllable(c) for c in text):
            return cls(reading=text)
        return cls(reading="", character=text)

    @property
    def display(self) -> str:
        return self.reading or self.character

    def collides_with(self, entry: HanjaEntry) -> bool:
        return bool(
            (self.reading and entry.reading == self.reading)
            or (self.character and entry.character == self.character)
        )


@dataclass(frozen=True)
class ScoringContext:
    surname: Surname
    needs: ElementNeedProfile
    gender: Gender
    birth_year: Optional[int] = None
    birth_order: Optional[int] = None
    config: ScoringConfig = _DEFAULT_CONFIG
    # yang/yin stem counts of the chart; None skips polarity compensation
    chart_polarity: Optional[Mapping[Polarity, int]] = None

    @property
    def era(self) -> Optional[Era]:
        return era_for_year(self.birth_year) if self.birth_year is not None else None


@dataclass(frozen=True)
class ScoredCandidate:
    surname: Surname
    char1: HanjaEntry
    char2: HanjaEntry
    full_name: str
    scores: Mapping[str, float]
    final_score: float
    deficient_match: float
    total_strokes: int
    explanation: str

    def tie_break_keys(self, ideal_strokes: int = 23) -> tuple:
        return (
            self.deficient_match,
            self.scores[Criterion.ENDING_SOUND.value],
            self.scores[Criterion.SYLLABLE_FLOW.value],
            abs(self.total_strokes - ideal_strokes),
        )

    def to_dict(self):
        return {
            "full_name": self.full_name,
            "hanja": self.char1.character + self.char2.character,
            "char1": self.char1.to_dict(),
            "char2": self.char2.to_dict(),
            "final_score": self.final_score,
            "scores": dict(self.scores),
            "deficient_match": self.deficient_match,
            "total_strokes": self.total_strokes,
            "explanation": self.explanation,
        }


# ============================================================
# CRITERIA
# ============================================================

def _clamp(value: float) -> float:
    return min(MAX_SCORE, max(0.0, value))


def _balanced_polarity(char1: HanjaEntry, char2: HanjaEntry) -> bool:
    return {char1.polarity, char2.polarity} == {Polarity.YANG, Polarity.YIN}


def _name_elements(char1: HanjaEntry, char2: HanjaEntry) -> tuple[set, set]:
    """Distinct primary elements, and secondary elements not already primary."""
    primaries = {char1.primary_element, char2.primary_element}
    secondaries = {c.secondary_element for c in (char1, char2) if c.secondary_element} - primaries
    return primaries, secondaries


def deficient_match(char1: HanjaEntry, char2: HanjaEntry, needs: ElementNeedProfile) -> float:
    """+1 per required primary element supplied, +0.5 per required secondary."""
    required = set(needs.required_elements)
    primaries, secondaries = _name_elements(char1, char2)
    return len(primaries & required) + 0.5 * len(secondaries & required)


POLARITY_COMPENSATION = 0.4


def _compensates_chart(char1: HanjaEntry, char2: HanjaEntry, chart_polarity) -> bool:
    """Two yang characters for a yin-leaning chart, or two yin for a yang-leaning one."""
    if not chart_polarity or char1.polarity is not char2.polarity:
        return False
    yang = chart_polarity.get(Polarity.YANG, 0)
    yin = chart_polarity.get(Polarity.YIN, 0)
    if char1.polarity is Polarity.YANG:
        return yin > yang
    return yang > yin


def element_score(char1, char2, ctx: ScoringContext) -> float:
    required = set(ctx.needs.required_elements)
    penalized = set(ctx.needs.penalized_elements)
    primaries, secondaries = _name_elements(char1, char2)

    score = 2.0 * len(primaries & required) + 1.0 * len(secondaries & required)
    score -= 1.5 * len(primaries & penalized) + 0.8 * len(secondaries & penalized)
    if _balanced_polarity(char1, char2):
        score += 0.5
    elif _compensates_chart(char1, char2, ctx.chart_polarity):
        score += POLARITY_COMPENSATION
    return _clamp(score)


def ending_sound_score(char1, char2, ctx: ScoringContext) -> float:
    return maleum_fit(char1.reading + char2.reading, ctx.gender, ctx.birth_year)


# Given names that read as everyday (mostly unflattering) nouns
NOUN_COLLISIONS = frozenset({
    "지랄", "사망", "구리", "고기", "방구", "호구", "소변", "대변",
    "변기", "치질", "주사", "사기", "기생", "장애",
})

FLOW_BASE = 3.5
NOUN_COLLISION_SCORE = 0.2
ONSET_IEUNG = 11


def syllable_flow_score(char1, char2, ctx: ScoringContext) -> float:
    given = char1.reading + char2.reading
    if given in NOUN_COLLISIONS:
        return NOUN_COLLISION_SCORE

    name_syllables = decompose(given)
    if len(name_syllables) < 2:
        return FLOW_BASE
    first, second = name_syllables[0], name_syllables[-1]
    surname_syllables = decompose(ctx.surname.reading)

    score = FLOW_BASE
    if ctx.era is not None:
        onsets, nuclei = ERA_FIRST_SYLLABLE[ctx.era]
        if first.onset in onsets:
            score += 0.4
        if first.nucleus in nuclei:
            score += 0.3

    chain = name_syllables
    if surname_syllables:
        last = surname_syllables[-1]
        if last.has_coda and first.onset_index == ONSET_IEUNG:
            score += 0.3  # coda carries over into the name
        elif not last.has_coda and first.onset_index in SOFT_ONSETS:
            score += 0.3
        chain = [last] + name_syllables

    for prev, nxt in zip(chain, chain[1:]):
        if prev.has_coda and not prev.has_soft_coda and nxt.onset_index in STRONG_ONSETS:
            score -= 0.7

    if first.onset_index == second.onset_index:
        score -= 0.5
    if first.nucleus_index == second.nucleus_index:
        score -= 0.5

    codas = sum(1 for s in surname_syllables + name_syllables if s.has_coda)
    if codas >= 2:
        score -= 0.3
    if codas >= 3:
        score -= 0.5
    return _clamp(score)


def era_phonology_score(char1, char2, ctx: ScoringContext) -> float:
    """60% sound-profile fit (3 points), 40% recorded era of the characters (2 points)."""
    if ctx.birth_year is None:
        return NEUTRAL_SCORE
    era = ctx.era
    sound = era_fit(char1.reading + char2.reading, ctx.birth_year) * 3 / 5
    recorded = (era_affinity(char1.era_affinity, era) + era_affinity(char2.era_affinity, era)) / 2
    return _clamp(sound + recorded * 2)


def gender_score(char1, char2, ctx: ScoringContext) -> float:
    wanted = GenderAffinity(ctx.gender.value)
    opposite = GenderAffinity.FEMALE if wanted is GenderAffinity.MALE else GenderAffinity.MALE
    matching = sum(1 for c in (char1, char2) if c.gender_affinity is wanted)
    opposing = sum(1 for c in (char1, char2) if c.gender_affinity is opposite)

    if opposing >= 2:
        return 0.75
    if opposing == 1:
        return 2.0
    if matching == 2:
        return 5.0
    if matching == 1:
        return 4.0
    return 3.0


def harmony_score(char1, char2, ctx: ScoringContext) -> float:
    cfg = ctx.config
    total = char1.stroke_count + char2.stroke_count
    score = 3.0

    lo, hi = cfg.preferred_strokes
    if lo <= total <= hi:
        score += 1.0
        lo, hi = cfg.sweet_strokes
        if lo <= total <= hi:
            score += 0.5
    lo, hi = cfg.acceptable_strokes
    if not lo <= total <= hi:
        score -= 1.0
    if char1.meaning and char1.meaning == char2.meaning:
        score -= 0.5
    if _balanced_polarity(char1, char2):
        score += 0.5
    return _clamp(score)


# Traditional characters for the eldest, second and later children;
# 一 in particular is reserved for the eldest son
BIRTH_ORDER_CHARS = MappingProxyType({
    1: frozenset("一元伯孟長太承"),
    2: frozenset("仲次再"),
    3: frozenset("叔季"),
})


def birth_order_score(char1, char2, ctx: ScoringContext) -> float:
    if ctx.birth_order is None:
        return NEUTRAL_SCORE
    order = min(max(ctx.birth_order, 1), 3)
    chars = {char1.character, char2.character}
    reserved = set().union(*(v for k, v in BIRTH_ORDER_CHARS.items() if k != order))

    score = 3.0
    if chars & BIRTH_ORDER_CHARS[order]:
        score += 2.0
    if chars & reserved:
        score -= 1.0
    return _clamp(score)


CriterionFn = Callable[[HanjaEntry, HanjaEntry, ScoringContext], float]

CRITERIA: tuple[tuple[Criterion, CriterionFn], ...] = (
    (Criterion.ELEMENT, element_score),
    (Criterion.ENDING_SOUND, ending_sound_score),
    (Criterion.SYLLABLE_FLOW, syllable_flow_score),
    (Criterion.ERA_PHONOLOGY, era_phonology_score),
    (Criterion.GENDER, gender_score),
    (Criterion.HARMONY, harmony_score),
    (Criterion.BIRTH_ORDER, birth_order_score),
)


# ============================================================
# SCORING
# ============================================================

def build_explanation(char1: HanjaEntry, char2: HanjaEntry, required) -> str:
    """List the required elements the pair supplies, e.g. "수 기운 보완, 목 기운 보완"."""
    supplied = {char1.primary_element, char2.primary_element}
    parts = [f"{e.hangul} 기운 보완" for e in required if e in supplied]
    return ", ".join(parts) if parts else "균형 잡힌 이름"


def score_with_context(char1: HanjaEntry, char2: HanjaEntry, ctx: ScoringContext) -> ScoredCandidate:
    cfg = ctx.config
    scores = {}
    weighted = 0.0
    total_weight = 0.0
    for criterion, fn in CRITERIA:
        if criterion is Criterion.BIRTH_ORDER and ctx.birth_order is None:
            continue
        value = fn(char1, char2, ctx)
        weight = cfg.weights.get(criterion, 0.0)
        scores[criterion.value] = round(value, cfg.decimals)
        weighted += value * weight
        total_weight += weight

    final = round(weighted / total_weight, cfg.decimals) if total_weight else 0.0

    return ScoredCandidate(
        surname=ctx.surname,
        char1=char1,
        char2=char2,
        full_name=ctx.surname.display + char1.reading + char2.reading,
        scores=MappingProxyType(scores),
        final_score=final,
        deficient_match=deficient_match(char1, char2, ctx.needs),
        total_strokes=char1.stroke_count + char2.stroke_count,
        explanation=build_explanation(char1, char2, ctx.needs.required_elements),
    )


def score_name(surname: Union[Surname, str], char1: HanjaEntry, char2: HanjaEntry,
               needs: ElementNeedProfile, gender: Union[Gender, str],
               birth_year: Optional[int] = None, birth_order: Optional[int] = None,
               config: Optional[ScoringConfig] = None,
               chart_polarity: Optional[Mapping[Polarity, int]] = None) -> ScoredCandidate:
    """Score one ordered character pair under a surname."""
    ctx = ScoringContext(
        surname=Surname.parse(surname),
        needs=needs,
        gender=Gender.parse(gender),
        birth_year=birth_year,
        birth_order=birth_order,
        config=config or _DEFAULT_CONFIG,
        chart_polarity=chart_polarity,
    )
    return score_with_context(char1, char2, ctx)
