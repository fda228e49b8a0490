"""
Saju (Four Pillars) computation engine.

Handles:
- Gregorian date/hour to four pillars (year, month, day, hour)
- Five-element histogram over stems and branches
- Ten-gods grouping relative to the day stem, and day-stem strength
- Branch relations (combinations, clashes, punishments, breaks, harms)
- Ten-year luck pillars stepped from the month pillar

Design principle: This module COMPUTES and FLAGS. Deciding which elements
a name should carry is left to `jakmyeong.needs`.

The month pillar follows the calendar month, not solar-term boundaries:
a birth on February 2nd and one on February 28th share a month pillar.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Union
import logging

from jakmyeong.astro_calendar import julian_day_number, parse_birth_date, validate_hour_minute
from jakmyeong.errors import InvalidInputError

logger = logging.getLogger(__name__)


# ============================================================
# FUNDAMENTAL DATA STRUCTURES
# ============================================================

class Polarity(Enum):
    YANG = "yang"
    YIN = "yin"

    @property
    def hangul(self) -> str:
        return "양" if self is Polarity.YANG else "음"

    @classmethod
    def from_label(cls, label: str) -> "Polarity":
        label = (label or "").strip().lower()
        if label in ("yang", "양"):
            return cls.YANG
        if label in ("yin", "음"):
            return cls.YIN
        raise ValueError(f"Unknown polarity label: {label!r}")


class Element(Enum):
    WOOD = "wood"
    FIRE = "fire"
    EARTH = "earth"
    METAL = "metal"
    WATER = "water"

    @property
    def hangul(self) -> str:
        return _ELEMENT_HANGUL[self]

    @classmethod
    def from_label(cls, label: str) -> "Element":
        label = (label or "").strip().lower()
        for element in cls:
            if label in (element.value, _ELEMENT_HANGUL[element]):
                return element
        raise ValueError(f"Unknown element label: {label!r}")


_ELEMENT_HANGUL = {
    Element.WOOD: "목",
    Element.FIRE: "화",
    Element.EARTH: "토",
    Element.METAL: "금",
    Element.WATER: "수",
}

ELEMENT_ORDER = (Element.WOOD, Element.FIRE, Element.EARTH, Element.METAL, Element.WATER)


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"

    @classmethod
    def parse(cls, value: Union["Gender", str]) -> "Gender":
        if isinstance(value, Gender):
            return value
        label = (value or "").strip().lower() if isinstance(value, str) else ""
        if label in ("male", "m", "남", "남자"):
            return cls.MALE
        if label in ("female", "f", "여", "여자"):
            return cls.FEMALE
        raise InvalidInputError(f"Gender must be 'male' or 'female', got {value!r}")


@dataclass(frozen=True)
class HeavenlyStem:
    hangul: str
    hanja: str
    element: Element
    polarity: Polarity
    index: int  # 0-9 in the cycle

    def __str__(self):
        return f"{self.hangul}({self.hanja}) {self.polarity.value} {self.element.value}"


@dataclass(frozen=True)
class EarthlyBranch:
    hangul: str
    hanja: str
    animal: str
    element: Element
    polarity: Polarity
    index: int  # 0-11 in the cycle

    def __str__(self):
        return f"{self.hangul}({self.hanja}) {self.animal}"


@dataclass(frozen=True)
class Pillar:
    stem: HeavenlyStem
    branch: EarthlyBranch
    position: str  # "year", "month", "day", "hour"

    @property
    def stem_element(self) -> Element:
        return self.stem.element

    @property
    def branch_element(self) -> Element:
        return self.branch.element

    @property
    def polarity(self) -> Polarity:
        return self.stem.polarity

    @property
    def cycle_index(self) -> int:
        """Position 0-59 of this stem/branch pair in the sexagenary cycle."""
        return (6 * self.stem.index - 5 * self.branch.index) % 60

    @property
    def label(self) -> str:
        return self.stem.hangul + self.branch.hangul

    def __str__(self):
        return f"{self.label} ({self.stem.hanja}{self.branch.hanja}, {self.polarity.value} {self.stem.element.value} {self.branch.animal})"

    def to_dict(self):
        return {
            "position": self.position,
            "stem": {
                "hangul": self.stem.hangul,
                "hanja": self.stem.hanja,
                "index": self.stem.index,
                "element": self.stem.element.value,
                "polarity": self.stem.polarity.value,
            },
            "branch": {
                "hangul": self.branch.hangul,
                "hanja": self.branch.hanja,
                "index": self.branch.index,
                "animal": self.branch.animal,
                "element": self.branch.element.value,
            },
            "combined": self.label,
            "description": str(self),
        }


# ============================================================
# STEM AND BRANCH DEFINITIONS
# ============================================================

HEAVENLY_STEMS = (
    HeavenlyStem("갑", "甲", Element.WOOD, Polarity.YANG, 0),
    HeavenlyStem("을", "乙", Element.WOOD, Polarity.YIN, 1),
    HeavenlyStem("병", "丙", Element.FIRE, Polarity.YANG, 2),
    HeavenlyStem("정", "丁", Element.FIRE, Polarity.YIN, 3),
    HeavenlyStem("무", "戊", Element.EARTH, Polarity.YANG, 4),
    HeavenlyStem("기", "己", Element.EARTH, Polarity.YIN, 5),
    HeavenlyStem("경", "庚", Element.METAL, Polarity.YANG, 6),
    HeavenlyStem("신", "辛", Element.METAL, Polarity.YIN, 7),
    HeavenlyStem("임", "壬", Element.WATER, Polarity.YANG, 8),
    HeavenlyStem("계", "癸", Element.WATER, Polarity.YIN, 9),
)

EARTHLY_BRANCHES = (
    EarthlyBranch("자", "子", "Rat", Element.WATER, Polarity.YANG, 0),
    EarthlyBranch("축", "丑", "Ox", Element.EARTH, Polarity.YIN, 1),
    EarthlyBranch("인", "寅", "Tiger", Element.WOOD, Polarity.YANG, 2),
    EarthlyBranch("묘", "卯", "Rabbit", Element.WOOD, Polarity.YIN, 3),
    EarthlyBranch("진", "辰", "Dragon", Element.EARTH, Polarity.YANG, 4),
    EarthlyBranch("사", "巳", "Snake", Element.FIRE, Polarity.YIN, 5),
    EarthlyBranch("오", "午", "Horse", Element.FIRE, Polarity.YANG, 6),
    EarthlyBranch("미", "未", "Goat", Element.EARTH, Polarity.YIN, 7),
    EarthlyBranch("신", "申", "Monkey", Element.METAL, Polarity.YANG, 8),
    EarthlyBranch("유", "酉", "Rooster", Element.METAL, Polarity.YIN, 9),
    EarthlyBranch("술", "戌", "Dog", Element.EARTH, Polarity.YANG, 10),
    EarthlyBranch("해", "亥", "Pig", Element.WATER, Polarity.YIN, 11),
)

# Lookup helpers ("신" is both a stem and a branch, so keep them apart)
STEM_BY_HANGUL = MappingProxyType({s.hangul: s for s in HEAVENLY_STEMS})
BRANCH_BY_HANGUL = MappingProxyType({b.hangul: b for b in EARTHLY_BRANCHES})

PILLAR_POSITIONS = ("year", "month", "day", "hour")


# ============================================================
# PILLAR COMPUTATION
# ============================================================

# 1900-01-01 sits at cycle index 36 (경자) and JDN 2415021
DAY_CYCLE_ANCHOR_INDEX = 36
DAY_CYCLE_ANCHOR_JDN = 2415021

# 1864 is the start of a sexagenary year cycle in this reckoning
YEAR_CYCLE_EPOCH = 1864

# Calendar month (1-12) -> branch index; January is Ox, December is Rat
MONTH_BRANCH = (1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 0)

# Five tigers: year stem index -> month stem offset
MONTH_STEM_START = MappingProxyType({0: 2, 1: 2, 2: 4, 3: 4, 4: 6, 5: 6, 6: 8, 7: 8, 8: 0, 9: 0})

# Five rats: day stem index mod 5 -> stem of the Rat hour
HOUR_STEM_START = MappingProxyType({0: 0, 1: 2, 2: 4, 3: 6, 4: 8})


def _pillar(cycle_stem: int, cycle_branch: int, position: str) -> Pillar:
    return Pillar(
        stem=HEAVENLY_STEMS[cycle_stem],
        branch=EARTHLY_BRANCHES[cycle_branch],
        position=position,
    )


def year_pillar(year: int) -> Pillar:
    """
    Compute the Year Pillar.

    The year turns over on January 1st; there is no Ipchun cutoff.
    """
    idx = (year - YEAR_CYCLE_EPOCH) % 60
    return _pillar(idx % 10, idx % 12, "year")


def month_pillar(year_stem_index: int, month: int) -> Pillar:
    """
    Compute the Month Pillar from the calendar month.

    Args:
        year_stem_index: index of the year's heavenly stem (0-9)
        month: Gregorian month 1-12
    """
    branch_index = MONTH_BRANCH[(month - 1) % 12]
    stem_index = (MONTH_STEM_START[year_stem_index] + branch_index) % 10
    return _pillar(stem_index, branch_index, "month")


def day_cycle_index(day: date) -> int:
    """Sexagenary index (0-59) of a civil date, linear in the Julian Day Number."""
    jdn = julian_day_number(day)
    return (DAY_CYCLE_ANCHOR_INDEX + (jdn - DAY_CYCLE_ANCHOR_JDN)) % 60


def day_pillar(day: date) -> Pillar:
    """Compute the Day Pillar using Julian Day Number."""
    idx = day_cycle_index(day)
    return _pillar(idx % 10, idx % 12, "day")


def hour_branch_index(hour: int) -> int:
    """
    Two-hour blocks; 23:00 and 00:00 both belong to the Rat hour.

    23:00-00:59 = 자 (Rat)   = branch 0
    01:00-02:59 = 축 (Ox)    = branch 1
    ...
    21:00-22:59 = 해 (Pig)   = branch 11
    """
    if hour == 23 or hour == 0:
        return 0
    return (hour + 1) // 2


def hour_pillar(day_stem_index: int, hour: int) -> Pillar:
    """
    Compute the Hour Pillar using the five rats rule.

    Args:
        day_stem_index: index of the day's heavenly stem (0-9)
        hour: hour in 24h format
    """
    branch_index = hour_branch_index(hour)
    stem_index = (HOUR_STEM_START[day_stem_index % 5] + branch_index) % 10
    return _pillar(stem_index, branch_index, "hour")


# ============================================================
# CHART
# ============================================================

@dataclass(frozen=True)
class Chart:
    """Four pillars plus the birth input they were computed from."""

    year: Pillar
    month: Pillar
    day: Pillar
    hour: Pillar
    gender: Gender
    birth_date: date
    birth_hour: int
    birth_minute: int
    element_counts: Mapping[Element, int] = field(default_factory=dict)

    @property
    def pillars(self) -> tuple[Pillar, Pillar, Pillar, Pillar]:
        return (self.year, self.month, self.day, self.hour)

    @property
    def day_stem(self) -> HeavenlyStem:
        return self.day.stem

    @property
    def day_stem_element(self) -> Element:
        return self.day.stem.element

    def to_dict(self):
        return {
            "birth": {
                "date": self.birth_date.isoformat(),
                "hour": self.birth_hour,
                "minute": self.birth_minute,
                "gender": self.gender.value,
            },
            "day_stem": {
                "hangul": self.day_stem.hangul,
                "hanja": self.day_stem.hanja,
                "element": self.day_stem.element.value,
                "polarity": self.day_stem.polarity.value,
                "description": str(self.day_stem),
            },
            "pillars": {p.position: p.to_dict() for p in self.pillars},
            "element_counts": {e.value: self.element_counts[e] for e in ELEMENT_ORDER},
            "luck_pillars": luck_pillars(self),
        }


def count_elements(pillars: Sequence[Pillar]) -> dict[Element, int]:
    """Tally stem and branch elements; four pillars always give a total of 8."""
    counts = {e: 0 for e in ELEMENT_ORDER}
    for pillar in pillars:
        counts[pillar.stem_element] += 1
        counts[pillar.branch_element] += 1
    return counts


def compute_chart(birth_date: Union[date, str], hour: int,
                  minute: Optional[int] = None,
                  gender: Union[Gender, str] = Gender.MALE) -> Chart:
    """
    Compute the four pillars from birth data.

    Args:
        birth_date: date or "YYYY-MM-DD"
        hour: birth hour 0-23
        minute: birth minute 0-59; recorded only, never moves a pillar
        gender: "male"/"female" or a Gender

    Raises:
        InvalidInputError: bad date, hour, minute or gender
    """
    day = parse_birth_date(birth_date)
    validate_hour_minute(hour, minute)
    sex = Gender.parse(gender)

    yp = year_pillar(day.year)
    mp = month_pillar(yp.stem.index, day.month)
    dp = day_pillar(day)
    hp = hour_pillar(dp.stem.index, hour)

    pillars = (yp, mp, dp, hp)
    chart = Chart(
        year=yp, month=mp, day=dp, hour=hp,
        gender=sex,
        birth_date=day,
        birth_hour=hour,
        birth_minute=minute if minute is not None else 0,
        element_counts=MappingProxyType(count_elements(pillars)),
    )
    logger.debug("Chart for %s %02d:%02d -> %s", day.isoformat(), hour,
                 chart.birth_minute, " ".join(p.label for p in pillars))
    return chart


# ============================================================
# LUCK PILLARS (대운)
# ============================================================

def luck_direction_backward(chart: Chart) -> bool:
    """Backward for a yang year stem with a male chart or a yin year stem with a female one."""
    yang_year = chart.year.stem.polarity is Polarity.YANG
    return yang_year == (chart.gender is Gender.MALE)


def luck_pillars(chart: Chart, count: int = 10) -> list[dict]:
    """
    Compute ten-year Luck Pillars (대운), stepping from the month pillar.

    Ages are fixed decades: 1-10, 11-20, ... There is no solar-term
    based starting age, matching the calendar-month month pillar.

    Args:
        chart: computed Chart
        count: how many luck pillars to compute

    Returns:
        List of luck pillar dicts with stem, branch, age_start, age_end
    """
    step = -1 if luck_direction_backward(chart) else 1
    month = chart.month

    pillars = []
    for i in range(1, count + 1):
        stem = HEAVENLY_STEMS[(month.stem.index + step * i) % 10]
        branch = EARTHLY_BRANCHES[(month.branch.index + step * i) % 12]
        age_start = (i - 1) * 10 + 1
        age_end = age_start + 9
        pillars.append({
            "number": i,
            "stem": stem.hangul,
            "stem_element": stem.element.value,
            "branch": branch.hangul,
            "branch_element": branch.element.value,
            "combined": stem.hangul + branch.hangul,
            "age_start": age_start,
            "age_end": age_end,
            "range": f"{age_start}-{age_end}",
        })
    return pillars


# ============================================================
# TEN GODS (십성) RELATIONSHIP MAPPING
# ============================================================

class TenGod(Enum):
    PEER = "peer"            # 비겁: same element
    OUTPUT = "output"        # 식상: day stem produces it
    WEALTH = "wealth"        # 재성: day stem overcomes it
    AUTHORITY = "authority"  # 관성: it overcomes the day stem
    RESOURCE = "resource"    # 인성: it produces the day stem

    @property
    def hangul(self) -> str:
        return _TEN_GOD_HANGUL[self]


_TEN_GOD_HANGUL = {
    TenGod.PEER: "비겁",
    TenGod.OUTPUT: "식상",
    TenGod.WEALTH: "재성",
    TenGod.AUTHORITY: "관성",
    TenGod.RESOURCE: "인성",
}

# Generation cycle: Wood → Fire → Earth → Metal → Water → Wood
PRODUCES = MappingProxyType({
    Element.WOOD: Element.FIRE,
    Element.FIRE: Element.EARTH,
    Element.EARTH: Element.METAL,
    Element.METAL: Element.WATER,
    Element.WATER: Element.WOOD,
})

# Overcoming cycle: Wood → Earth → Water → Fire → Metal → Wood
OVERCOMES = MappingProxyType({
    Element.WOOD: Element.EARTH,
    Element.EARTH: Element.WATER,
    Element.WATER: Element.FIRE,
    Element.FIRE: Element.METAL,
    Element.METAL: Element.WOOD,
})

PRODUCED_BY = MappingProxyType({v: k for k, v in PRODUCES.items()})
OVERCOME_BY = MappingProxyType({v: k for k, v in OVERCOMES.items()})


def _relation(day_element: Element, other: Element) -> TenGod:
    if day_element == other:
        return TenGod.PEER
    if PRODUCES[day_element] == other:
        return TenGod.OUTPUT
    if OVERCOMES[day_element] == other:
        return TenGod.WEALTH
    if OVERCOMES[other] == day_element:
        return TenGod.AUTHORITY
    return TenGod.RESOURCE


# (day stem element, other element) -> ten-god group
TEN_GOD_TABLE = MappingProxyType({
    (dm, other): _relation(dm, other)
    for dm in ELEMENT_ORDER for other in ELEMENT_ORDER
})


def ten_god(day_element: Element, other: Element) -> TenGod:
    """Ten-god group of `other` seen from the day stem's element."""
    return TEN_GOD_TABLE[(day_element, other)]


def map_ten_gods(chart: Chart) -> list[dict]:
    """
    Classify all 8 stem/branch elements against the day stem.
    The day stem itself counts as a peer.
    """
    dm = chart.day_stem_element
    results = []
    for pillar in chart.pillars:
        for source, symbol, element in (
            ("stem", pillar.stem.hangul, pillar.stem_element),
            ("branch", pillar.branch.hangul, pillar.branch_element),
        ):
            results.append({
                "position": pillar.position,
                "source": source,
                "symbol": symbol,
                "element": element.value,
                "ten_god": ten_god(dm, element).value,
            })
    return results


class DayStemStrength(Enum):
    WEAK = "weak"
    BALANCED = "balanced"
    STRONG = "strong"


# ============================================================
# BRANCH RELATIONS (합충형파해)
# ============================================================

# Six Combinations (육합): pair -> resulting element
SIX_COMBINATIONS = MappingProxyType({
    (0, 1): Element.EARTH,    # 자축
    (2, 11): Element.WOOD,    # 인해
    (3, 10): Element.FIRE,    # 묘술
    (4, 9): Element.METAL,    # 진유
    (5, 8): Element.WATER,    # 사신
    (6, 7): Element.FIRE,     # 오미
})

# Six Clashes (육충): pair -> element damaged by the dominating branch
SIX_CLASHES = MappingProxyType({
    (0, 6): Element.FIRE,     # 자오: water douses fire
    (1, 7): Element.EARTH,    # 축미: earth against earth
    (2, 8): Element.WOOD,     # 인신: metal cuts wood
    (3, 9): Element.WOOD,     # 묘유: metal cuts wood
    (4, 10): Element.EARTH,   # 진술: earth against earth
    (5, 11): Element.FIRE,    # 사해: water douses fire
})

# Six Breaks (육파)
SIX_BREAKS = (
    (0, 9),   # 자유
    (1, 4),   # 축진
    (2, 11),  # 인해
    (3, 6),   # 묘오
    (5, 8),   # 사신
    (7, 10),  # 미술
)

# Six Harms (육해)
SIX_HARMS = (
    (0, 7),   # 자미
    (1, 6),   # 축오
    (2, 5),   # 인사
    (3, 4),   # 묘진
    (8, 11),  # 신해
    (9, 10),  # 유술
)

# Three Punishments (삼형): fire when at least two members are present
THREE_PUNISHMENTS = MappingProxyType({
    "인사신": (2, 5, 8),
    "축술미": (1, 10, 7),
})

SUB_PUNISHMENT = (0, 3)                   # 자묘
SELF_PUNISHMENT_BRANCHES = (4, 6, 9, 11)  # 진, 오, 유, 해

CONFLICT_EARTH_THRESHOLD = 2


@dataclass(frozen=True)
class BranchRelations:
    relations: tuple = ()
    damaged_elements: tuple = ()
    conflict_count: int = 0

    def of_type(self, relation_type: str) -> list[dict]:
        return [r for r in self.relations if r["type"] == relation_type]

    def to_dict(self):
        return {
            "relations": list(self.relations),
            "damaged_elements": [e.value for e in self.damaged_elements],
            "conflict_count": self.conflict_count,
        }


def find_branch_relations(branches: Sequence[EarthlyBranch],
                          labels: Optional[Sequence[str]] = None) -> BranchRelations:
    """
    Find all branch relations between a set of branches.

    Each table entry fires at most once, when all of its members are
    present; a repeated branch does not repeat the relation. Every
    relation found, in any category, bumps the conflict counter; two or
    more conflicts add earth as a damaged element, since earth mediates
    the friction.

    Args:
        branches: EarthlyBranch objects to check
        labels: optional labels for each branch (e.g., "year", "month")
    """
    if labels is None:
        labels = [f"branch_{i}" for i in range(len(branches))]

    present = {}
    for i, b in enumerate(branches):
        present.setdefault(b.index, []).append(i)

    def involved(members):
        # first occurrence of each member
        return [f"{labels[present[idx][0]]}:{branches[present[idx][0]].hangul}" for idx in members]

    def all_present(members):
        return all(idx in present for idx in members)

    relations = []
    damaged = []

    for pair, element in SIX_COMBINATIONS.items():
        if all_present(pair):
            relations.append({
                "type": "combination",
                "branches": involved(pair),
                "result_element": element.value,
            })

    for pair, hurt in SIX_CLASHES.items():
        if all_present(pair):
            relations.append({
                "type": "clash",
                "branches": involved(pair),
                "damaged_element": hurt.value,
            })
            if hurt not in damaged:
                damaged.append(hurt)

    for name, triple in THREE_PUNISHMENTS.items():
        members = [idx for idx in triple if idx in present]
        if len(members) >= 2:
            relations.append({
                "type": "punishment",
                "kind": name,
                "branches": involved(members),
                "complete": len(members) == len(triple),
            })

    if all_present(SUB_PUNISHMENT):
        relations.append({
            "type": "punishment",
            "kind": "자묘",
            "branches": involved(SUB_PUNISHMENT),
            "complete": True,
        })

    for idx in SELF_PUNISHMENT_BRANCHES:
        if len(present.get(idx, [])) >= 2:
            relations.append({
                "type": "punishment",
                "kind": "자형",
                "branches": [f"{labels[i]}:{branches[i].hangul}" for i in present[idx]],
                "complete": True,
            })

    for pair in SIX_BREAKS:
        if all_present(pair):
            relations.append({"type": "break", "branches": involved(pair)})

    for pair in SIX_HARMS:
        if all_present(pair):
            relations.append({"type": "harm", "branches": involved(pair)})

    conflict_count = len(relations)
    if conflict_count >= CONFLICT_EARTH_THRESHOLD and Element.EARTH not in damaged:
        damaged.append(Element.EARTH)

    return BranchRelations(
        relations=tuple(relations),
        damaged_elements=tuple(damaged),
        conflict_count=conflict_count,
    )


# ============================================================
# STRUCTURE ANALYSIS
# ============================================================

@dataclass(frozen=True)
class StructureAnalysis:
    element_counts: Mapping[Element, int]
    ten_gods: tuple
    ten_god_counts: Mapping[TenGod, int]
    help_count: int
    drain_count: int
    day_stem_strength: DayStemStrength
    branch_relations: BranchRelations
    polarity_counts: Mapping[Polarity, int]

    def to_dict(self):
        return {
            "element_counts": {e.value: self.element_counts[e] for e in ELEMENT_ORDER},
            "ten_gods": list(self.ten_gods),
            "ten_god_counts": {g.value: self.ten_god_counts[g] for g in TenGod},
            "help": self.help_count,
            "drain": self.drain_count,
            "day_stem_strength": self.day_stem_strength.value,
            "branch_relations": self.branch_relations.to_dict(),
            "polarity": {p.value: self.polarity_counts[p] for p in Polarity},
        }


def classify_strength(help_count: int, drain_count: int) -> DayStemStrength:
    if help_count < drain_count:
        return DayStemStrength.WEAK
    if help_count > drain_count:
        return DayStemStrength.STRONG
    return DayStemStrength.BALANCED


def analyze_structure(chart: Chart) -> StructureAnalysis:
    """Element histogram, ten gods, day-stem strength and branch relations."""
    gods = map_ten_gods(chart)
    god_counts = Counter(TenGod(g["ten_god"]) for g in gods)
    counts = {g: god_counts.get(g, 0) for g in TenGod}

    help_count = counts[TenGod.PEER] + counts[TenGod.RESOURCE]
    drain_count = counts[TenGod.OUTPUT] + counts[TenGod.WEALTH] + counts[TenGod.AUTHORITY]

    relations = find_branch_relations(
        [p.branch for p in chart.pillars], list(PILLAR_POSITIONS)
    )

    stem_polarity = Counter(p.polarity for p in chart.pillars)

    return StructureAnalysis(
        element_counts=MappingProxyType(count_elements(chart.pillars)),
        ten_gods=tuple(gods),
        ten_god_counts=MappingProxyType(counts),
        help_count=help_count,
        drain_count=drain_count,
        day_stem_strength=classify_strength(help_count, drain_count),
        branch_relations=relations,
        polarity_counts=MappingProxyType({p: stem_polarity.get(p, 0) for p in Polarity}),
    )
