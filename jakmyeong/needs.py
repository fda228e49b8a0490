"""
Needed-element resolution.

Turns a chart and its structure analysis into the set of elements a name
should supply, plus elements to keep out of a name when the day stem is weak.
"""

from dataclasses import dataclass
import logging

from jakmyeong.bazi import (
    ELEMENT_ORDER, OVERCOME_BY, OVERCOMES, PRODUCED_BY, PRODUCES,
    Chart, DayStemStrength, Element, StructureAnalysis, TenGod,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElementNeedProfile:
    required_elements: tuple
    penalized_elements: tuple = ()
    reasons: tuple = ()
    supplement_good: tuple = ()
    excess: tuple = ()

    @property
    def is_weak_day_stem(self) -> bool:
        return bool(self.penalized_elements)

    def to_dict(self):
        return {
            "required": [e.value for e in self.required_elements],
            "penalized": [e.value for e in self.penalized_elements],
            "reasons": list(self.reasons),
            "supplement_good": [e.value for e in self.supplement_good],
            "excess": [e.value for e in self.excess],
        }


def _ordered(elements) -> tuple:
    return tuple(e for e in ELEMENT_ORDER if e in elements)


def least_frequent(counts) -> list[Element]:
    low = min(counts[e] for e in ELEMENT_ORDER)
    return [e for e in ELEMENT_ORDER if counts[e] == low]


def second_least_frequent(counts) -> list[Element]:
    levels = sorted({counts[e] for e in ELEMENT_ORDER})
    if len(levels) < 2:
        return []
    return [e for e in ELEMENT_ORDER if counts[e] == levels[1]]


def most_frequent(counts) -> list[Element]:
    """Most frequent elements, only when they stand above the minimum."""
    high = max(counts[e] for e in ELEMENT_ORDER)
    low = min(counts[e] for e in ELEMENT_ORDER)
    if high <= low:
        return []
    return [e for e in ELEMENT_ORDER if counts[e] == high]


def ten_god_needs(day_element: Element, structure: StructureAnalysis) -> list[Element]:
    """Elements suggested by an authority-heavy or help-starved ten-god spread."""
    counts = structure.ten_god_counts
    help_count = structure.help_count
    authority = counts[TenGod.AUTHORITY]
    needed = []

    if authority > help_count and counts[TenGod.OUTPUT] < authority:
        # output restrains authority
        needed.append(PRODUCES[day_element])
    if help_count < 2 and counts[TenGod.WEALTH] + authority > help_count:
        needed.extend([day_element, PRODUCED_BY[day_element]])
    return needed


def resolve_needs(chart: Chart, structure: StructureAnalysis) -> ElementNeedProfile:
    """
    Decide which elements a name should supplement.

    A weak day stem overrides plain counting: the chart may look balanced
    by numbers while clashes leave the day stem without support. In that
    case the resource and peer elements are required and every draining
    element (authority, output, wealth) is penalised.

    Otherwise the required set is the union of the rarest elements, the
    elements damaged by branch relations and the ten-god suggestions,
    falling back to all five when that union is empty.
    """
    dm = chart.day_stem_element
    counts = structure.element_counts
    reasons = []

    if structure.day_stem_strength is DayStemStrength.WEAK:
        required = _ordered({PRODUCED_BY[dm], dm})
        penalized = _ordered({OVERCOME_BY[dm], PRODUCES[dm], OVERCOMES[dm]})
        reasons.append("day_stem_strength")
    else:
        penalized = ()
        union = set(least_frequent(counts))
        if union:
            reasons.append("ratio")

        damaged = structure.branch_relations.damaged_elements
        if damaged:
            union.update(damaged)
            reasons.append("branch_relations")

        extra = ten_god_needs(dm, structure)
        if extra:
            union.update(extra)
            reasons.append("ten_gods")

        required = _ordered(union) or ELEMENT_ORDER

    profile = ElementNeedProfile(
        required_elements=required,
        penalized_elements=penalized,
        reasons=tuple(reasons),
        supplement_good=_ordered(set(second_least_frequent(counts)) - set(required)),
        excess=_ordered(most_frequent(counts)),
    )
    logger.debug("Needs for day stem %s (%s): required=%s penalized=%s",
                 chart.day_stem.hangul, structure.day_stem_strength.value,
                 [e.value for e in profile.required_elements],
                 [e.value for e in profile.penalized_elements])
    return profile
