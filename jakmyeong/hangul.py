"""
Hangul phonology for name scoring.

Handles:
- Arithmetic decomposition of syllable blocks into onset/nucleus/coda
- Phonetic feature ratios (batchim, strong/soft onsets, open vowels, soft codas)
- Birth-decade era profiles and the era fit of a name's sound
- Ending-sound (말음) trend fit per gender and era

Jamo indices follow the Unicode composition order:
19 onsets, 21 nuclei, 28 codas (coda 0 = no batchim).
"""

from dataclasses import astuple, dataclass
from enum import Enum
from types import MappingProxyType
from typing import Optional

from jakmyeong.bazi import Gender

HANGUL_FIRST = 0xAC00
HANGUL_LAST = 0xD7A3
SYLLABLES_PER_ONSET = 588  # 21 nuclei * 28 codas
CODAS_PER_NUCLEUS = 28

ONSETS = (
    "ㄱ", "ㄲ", "ㄴ", "ㄷ", "ㄸ", "ㄹ", "ㅁ", "ㅂ", "ㅃ",
    "ㅅ", "ㅆ", "ㅇ", "ㅈ", "ㅉ", "ㅊ", "ㅋ", "ㅌ", "ㅍ", "ㅎ",
)

NUCLEI = (
    "ㅏ", "ㅐ", "ㅑ", "ㅒ", "ㅓ", "ㅔ", "ㅕ", "ㅖ",
    "ㅗ", "ㅘ", "ㅙ", "ㅚ", "ㅛ",
    "ㅜ", "ㅝ", "ㅞ", "ㅟ", "ㅠ",
    "ㅡ", "ㅢ", "ㅣ",
)

CODAS = (
    "",
    "ㄱ", "ㄲ", "ㄳ", "ㄴ", "ㄵ", "ㄶ", "ㄷ",
    "ㄹ", "ㄺ", "ㄻ", "ㄼ", "ㄽ", "ㄾ", "ㄿ", "ㅀ",
    "ㅁ", "ㅂ", "ㅄ", "ㅅ", "ㅆ", "ㅇ", "ㅈ", "ㅊ", "ㅋ", "ㅌ", "ㅍ", "ㅎ",
)

# Obstruents: ㄱ ㄲ ㄷ ㄸ ㅂ ㅃ ㅈ ㅉ ㅊ ㅋ ㅌ ㅍ
STRONG_ONSETS = frozenset({0, 1, 3, 4, 7, 8, 12, 13, 14, 15, 16, 17})
# Sonorants and fricatives: ㄴ ㄹ ㅁ ㅅ ㅇ ㅎ
SOFT_ONSETS = frozenset({2, 5, 6, 9, 11, 18})
# ㄴ ㄹ ㅁ
LIQUID_NASAL_ONSETS = frozenset({2, 5, 6})
# ㅏ ㅐ ㅑ ㅓ ㅔ ㅕ ㅗ ㅘ
OPEN_NUCLEI = frozenset({0, 1, 2, 4, 5, 6, 8, 9})
# none, ㄴ, ㄹ, ㅁ, ㅇ
SOFT_CODAS = frozenset({0, 4, 8, 16, 21})


# ============================================================
# DECOMPOSITION
# ============================================================

@dataclass(frozen=True)
class SyllableDecomposition:
    onset_index: int
    nucleus_index: int
    coda_index: int

    @property
    def onset(self) -> str:
        return ONSETS[self.onset_index]

    @property
    def nucleus(self) -> str:
        return NUCLEI[self.nucleus_index]

    @property
    def coda(self) -> str:
        return CODAS[self.coda_index]

    @property
    def has_coda(self) -> bool:
        return self.coda_index != 0

    @property
    def has_soft_coda(self) -> bool:
        return self.coda_index in SOFT_CODAS

    @property
    def rime(self) -> str:
        return self.nucleus + self.coda


def is_hangul_syllable(char: str) -> bool:
    return len(char) == 1 and HANGUL_FIRST <= ord(char) <= HANGUL_LAST


def decompose(text: str) -> list[SyllableDecomposition]:
    """
    Split Hangul syllable blocks into jamo indices.
    Anything outside U+AC00..U+D7A3 is skipped, not rejected.
    """
    result = []
    for char in text or "":
        if not is_hangul_syllable(char):
            continue
        offset = ord(char) - HANGUL_FIRST
        result.append(SyllableDecomposition(
            onset_index=offset // SYLLABLES_PER_ONSET,
            nucleus_index=(offset % SYLLABLES_PER_ONSET) // CODAS_PER_NUCLEUS,
            coda_index=offset % CODAS_PER_NUCLEUS,
        ))
    return result


# ============================================================
# PHONETIC FEATURES
# ============================================================

@dataclass(frozen=True)
class PhoneticFeatures:
    batchim_ratio: float = 0.0
    strong_onset_ratio: float = 0.0
    soft_onset_ratio: float = 0.0
    open_vowel_ratio: float = 0.0
    soft_coda_ratio: float = 0.0

    def as_tuple(self) -> tuple:
        return astuple(self)


def analyze_phonetics(name: str) -> PhoneticFeatures:
    syllables = decompose(name)
    n = len(syllables)
    if n == 0:
        return PhoneticFeatures()

    def ratio(predicate):
        return sum(1 for s in syllables if predicate(s)) / n

    return PhoneticFeatures(
        batchim_ratio=ratio(lambda s: s.has_coda),
        strong_onset_ratio=ratio(lambda s: s.onset_index in STRONG_ONSETS),
        soft_onset_ratio=ratio(lambda s: s.onset_index in SOFT_ONSETS),
        open_vowel_ratio=ratio(lambda s: s.nucleus_index in OPEN_NUCLEI),
        soft_coda_ratio=ratio(lambda s: s.coda_index in SOFT_CODAS),
    )


# ============================================================
# ERAS
# ============================================================

class Era(Enum):
    TRADITIONAL = "traditional"  # 전통
    MID = "mid"                  # 중세대
    NEW = "new"                  # 신세대
    LATEST = "latest"            # 최신
    ALL = "all"                  # 전체

    @classmethod
    def from_label(cls, label: str) -> "Era":
        label = (label or "").strip().lower()
        for era in cls:
            if label in (era.value, _ERA_HANGUL[era]):
                return era
        raise ValueError(f"Unknown era label: {label!r}")


_ERA_HANGUL = {
    Era.TRADITIONAL: "전통",
    Era.MID: "중세대",
    Era.NEW: "신세대",
    Era.LATEST: "최신",
    Era.ALL: "전체",
}

_ERA_SEQUENCE = (Era.TRADITIONAL, Era.MID, Era.NEW, Era.LATEST)

# Target (batchim, strong onset, soft onset, open vowel, soft coda) per birth decade
ERA_PROFILES = MappingProxyType({
    1950: PhoneticFeatures(0.65, 0.45, 0.45, 0.55, 0.55),
    1960: PhoneticFeatures(0.62, 0.45, 0.45, 0.55, 0.60),
    1970: PhoneticFeatures(0.60, 0.40, 0.50, 0.50, 0.65),
    1980: PhoneticFeatures(0.60, 0.40, 0.50, 0.50, 0.70),
    1990: PhoneticFeatures(0.55, 0.40, 0.55, 0.50, 0.75),
    2000: PhoneticFeatures(0.50, 0.35, 0.60, 0.55, 0.80),
    2010: PhoneticFeatures(0.40, 0.30, 0.65, 0.60, 0.85),
    2020: PhoneticFeatures(0.30, 0.25, 0.70, 0.65, 0.90),
})

DECADE_ERA = MappingProxyType({
    1950: Era.TRADITIONAL,
    1960: Era.TRADITIONAL,
    1970: Era.MID,
    1980: Era.MID,
    1990: Era.NEW,
    2000: Era.NEW,
    2010: Era.LATEST,
    2020: Era.LATEST,
})


def decade_bucket(birth_year: int) -> int:
    """Birth decade, clamped to 1950s..2020s."""
    if birth_year < 1960:
        return 1950
    if birth_year >= 2020:
        return 2020
    return (birth_year // 10) * 10


def era_for_year(birth_year: int) -> Era:
    return DECADE_ERA[decade_bucket(birth_year)]


def era_fit(name: str, birth_year: int) -> float:
    """
    How closely the name's sound matches its birth decade, 0-5.
    Reaches zero once the mean per-feature deviation is 0.5.
    """
    features = analyze_phonetics(name).as_tuple()
    target = ERA_PROFILES[decade_bucket(birth_year)].as_tuple()
    mad = sum(abs(a - b) for a, b in zip(features, target)) / len(target)
    return max(0.0, 5 * (1 - 2 * mad))


def era_affinity(char_era: Era, target: Era) -> float:
    """1.0 on the same era, 0.7 for all-era characters, 0.5 for a neighbouring era."""
    if char_era is target:
        return 1.0
    if char_era is Era.ALL or target is Era.ALL:
        return 0.7
    distance = abs(_ERA_SEQUENCE.index(char_era) - _ERA_SEQUENCE.index(target))
    return 0.5 if distance == 1 else 0.0


# First-syllable onsets and nuclei in vogue per era
ERA_FIRST_SYLLABLE = MappingProxyType({
    Era.TRADITIONAL: (frozenset("ㅇㅅㅈㄱㅂ"), frozenset("ㅕㅓㅗㅜ")),
    Era.MID: (frozenset("ㅈㅅㅎㅁㅇ"), frozenset("ㅣㅓㅜㅕ")),
    Era.NEW: (frozenset("ㅈㅎㅁㅅㅇㄷ"), frozenset("ㅣㅕㅓㅐ")),
    Era.LATEST: (frozenset("ㅎㅅㅇㄷㅈ"), frozenset("ㅏㅓㅗㅣㅖ")),
})


# ============================================================
# ENDING SOUND (말음)
# ============================================================

# Keys, most specific first:
#   "<preceding coda or _>+<final rime>"   e.g. "_+ㅜㄴ" for 하준, "ㄴ+ㅜ" for 현우
#   "<final rime>"                         e.g. "ㅜㄴ"
#   "<final nucleus>"                      e.g. "ㅜ"
MALEUM_TABLES = MappingProxyType({
    (Gender.MALE, Era.TRADITIONAL): MappingProxyType({
        "ㅇ+ㅜ": 1.0, "ㅇ+ㅓㄹ": 1.0, "ㅓㄹ": 0.9, "ㅜ": 0.9, "ㅗ": 0.85,
        "ㅕㅇ": 0.8, "ㅣㄱ": 0.8, "ㅗㅇ": 0.7, "ㅓㄱ": 0.7, "ㅣㄴ": 0.6, "ㅜㄴ": 0.5,
    }),
    (Gender.MALE, Era.MID): MappingProxyType({
        "ㅇ+ㅜㄴ": 1.0, "ㄴ+ㅗ": 1.0, "ㅇ+ㅣㄴ": 1.0, "ㅜㄴ": 0.9, "ㅕㄴ": 0.9,
        "ㅗ": 0.8, "ㅓㄱ": 0.8, "ㅣㄴ": 0.8, "ㅜ": 0.7,
    }),
    (Gender.MALE, Era.NEW): MappingProxyType({
        "ㄴ+ㅜ": 1.0, "_+ㅕㄴ": 1.0, "ㄴ+ㅜㄴ": 1.0, "ㅕㄴ": 1.0, "ㅜㄴ": 0.9,
        "ㅜ": 0.9, "ㅓ": 0.8, "ㅐ": 0.8, "ㅓㄱ": 0.6, "ㅗ": 0.5,
    }),
    (Gender.MALE, Era.LATEST): MappingProxyType({
        "_+ㅜㄴ": 1.0, "_+ㅠㄴ": 1.0, "ㄴ+ㅜ": 0.9, "_+ㅏㄴ": 0.9, "ㅜㄴ": 1.0,
        "ㅠㄴ": 1.0, "ㅜ": 0.9, "ㅏㄴ": 0.8, "ㅗ": 0.7, "ㅓㄱ": 0.3, "ㅓㄹ": 0.2, "ㅣㄱ": 0.2,
    }),
    (Gender.FEMALE, Era.TRADITIONAL): MappingProxyType({
        "ㅇ+ㅜㄱ": 1.0, "ㄴ+ㅏ": 1.0, "ㅏ": 1.0, "ㅜㄱ": 0.9, "ㅗㄱ": 0.9,
        "ㅣ": 0.8, "ㅜㄴ": 0.8,
    }),
    (Gender.FEMALE, Era.MID): MappingProxyType({
        "ㄴ+ㅜ": 1.0, "ㅇ+ㅢ": 1.0, "_+ㅣㄴ": 1.0, "ㅣㄴ": 0.9, "ㅕㄴ": 0.9,
        "ㅢ": 0.9, "ㅜ": 0.8, "ㅕㅇ": 0.8, "ㅓㅇ": 0.8,
    }),
    (Gender.FEMALE, Era.NEW): MappingProxyType({
        "_+ㅕㄴ": 1.0, "_+ㅡㄴ": 1.0, "ㄴ+ㅣ": 0.9, "ㅕㄴ": 1.0, "ㅣㄴ": 0.9,
        "ㅡㄴ": 0.9, "ㅣ": 0.8, "ㅕㅇ": 0.8,
    }),
    (Gender.FEMALE, Era.LATEST): MappingProxyType({
        "_+ㅏ": 1.0, "ㄴ+ㅏ": 1.0, "_+ㅣㄴ": 1.0, "_+ㅕㄴ": 1.0, "ㅏ": 1.0,
        "ㅠㄴ": 0.9, "ㅕㄴ": 0.9, "ㅣㄴ": 0.9, "ㅝㄴ": 0.9, "ㅏㄴ": 0.7, "ㅜㄱ": 0.1,
    }),
})

NEUTRAL_SCORE = 2.5
NO_CODA_FALLBACK = 2.5
SOFT_CODA_FALLBACK = 2.0
HARD_CODA_FALLBACK = 1.5
MALE_SOFT_ENDING_PENALTY = 1.5


def maleum_keys(syllables: list[SyllableDecomposition]) -> list[str]:
    last = syllables[-1]
    keys = []
    if len(syllables) >= 2:
        keys.append(f"{syllables[-2].coda or '_'}+{last.rime}")
    keys.append(last.rime)
    if last.nucleus != last.rime:
        keys.append(last.nucleus)
    return keys


def maleum_fit(given_name: str, gender: Gender, birth_year: Optional[int]) -> float:
    """
    Ending-sound trend fit, 0-5.

    Without a birth year the score is the neutral midpoint.
    """
    syllables = decompose(given_name)
    if birth_year is None or not syllables:
        return NEUTRAL_SCORE

    table = MALEUM_TABLES[(gender, era_for_year(birth_year))]
    last = syllables[-1]

    score = None
    for key in maleum_keys(syllables):
        if key in table:
            score = table[key] * 5
            break
    if score is None:
        if not last.has_coda:
            score = NO_CODA_FALLBACK
        elif last.has_soft_coda:
            score = SOFT_CODA_FALLBACK
        else:
            score = HARD_CODA_FALLBACK

    if gender is Gender.MALE and last.onset_index in LIQUID_NASAL_ONSETS and not last.has_coda:
        score -= MALE_SOFT_ENDING_PENALTY

    return min(5.0, max(0.0, score))
