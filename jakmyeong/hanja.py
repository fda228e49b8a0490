"""
Hanja dictionary records and loaders.

Dictionary files are XML, one <hanja> element per character:

    <hanja><char>俊</char><reading>준</reading><main_element>화</main_element>
    <sub_element>없음</sub_element><strokes>9</strokes><yinYang>양</yinYang>
    <meaning>준걸 준</meaning><gender>남</gender><era>최신</era></hanja>

Older files use <element> instead of <main_element> and omit gender/era.
All defaulting happens here, once, so scoring only ever sees complete
`HanjaEntry` records.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union
import logging
import xml.etree.ElementTree as ET

from jakmyeong.bazi import Element, Polarity
from jakmyeong.hangul import Era

logger = logging.getLogger(__name__)

# Characters kept out of names: death, illness, misfortune and the like
EXCLUDED_CHARS = frozenset(
    "死病凶惡毒苦貧賤禍亡敗破裂絶滅殺傷痛悲怨恨怒恐驚危"
    "鬼魔妖怪邪淫姦盜賊囚刑罰屍棺墓葬哀哭泣血汙穢醜陋"
    "奢迷訟嬸侮陵甁夜冥默"
)

# Entries where the glyph column holds a reading by mistake
CHAR_FIXES = {"안": "安", "완": "婉"}

NO_SECONDARY = ("", "없음", "none")


class GenderAffinity(Enum):
    NEUTRAL = "neutral"
    MALE = "male"
    FEMALE = "female"

    @classmethod
    def from_label(cls, label: str) -> "GenderAffinity":
        label = (label or "").strip().lower()
        if label in ("male", "m", "남", "남성", "남자"):
            return cls.MALE
        if label in ("female", "f", "여", "여성", "여자"):
            return cls.FEMALE
        if label not in ("", "neutral", "양", "양성", "중성", "공용"):
            logger.warning("Unknown gender label %r, treating as neutral", label)
        return cls.NEUTRAL


@dataclass(frozen=True)
class HanjaEntry:
    character: str
    reading: str
    primary_element: Element
    secondary_element: Optional[Element] = None
    stroke_count: int = 0
    polarity: Polarity = Polarity.YANG
    meaning: str = ""
    gender_affinity: GenderAffinity = GenderAffinity.NEUTRAL
    era_affinity: Era = Era.ALL

    @property
    def is_valid(self) -> bool:
        return bool(self.character) and bool(self.reading)

    @classmethod
    def from_record(cls, record: Mapping[str, str]) -> "HanjaEntry":
        """
        Build an entry from raw tag -> text pairs, applying defaults.

        Raises:
            ValueError: no usable primary element
        """
        char = (record.get("char") or "").strip()
        char = CHAR_FIXES.get(char, char)

        primary = Element.from_label(record.get("main_element") or record.get("element") or "")

        sub_label = (record.get("sub_element") or "").strip()
        secondary = None
        if sub_label.lower() not in NO_SECONDARY:
            try:
                secondary = Element.from_label(sub_label)
            except ValueError:
                logger.warning("Unknown secondary element %r for %s", sub_label, char)

        try:
            strokes = int((record.get("strokes") or "0").strip())
        except ValueError:
            strokes = 0

        try:
            polarity = Polarity.from_label(record.get("yinYang") or "양")
        except ValueError:
            polarity = Polarity.YANG

        era_label = record.get("era") or "전체"
        try:
            era = Era.from_label(era_label)
        except ValueError:
            logger.warning("Unknown era label %r for %s, using all", era_label, char)
            era = Era.ALL

        return cls(
            character=char,
            reading=(record.get("reading") or "").strip(),
            primary_element=primary,
            secondary_element=secondary,
            stroke_count=strokes,
            polarity=polarity,
            meaning=(record.get("meaning") or "").strip(),
            gender_affinity=GenderAffinity.from_label(record.get("gender") or ""),
            era_affinity=era,
        )

    def to_dict(self):
        return {
            "char": self.character,
            "reading": self.reading,
            "element": self.primary_element.value,
            "sub_element": self.secondary_element.value if self.secondary_element else None,
            "strokes": self.stroke_count,
            "polarity": self.polarity.value,
            "meaning": self.meaning,
            "gender": self.gender_affinity.value,
            "era": self.era_affinity.value,
        }


@dataclass(frozen=True)
class SurnameHanja:
    character: str
    meaning: str = ""


# ============================================================
# LOADERS
# ============================================================

def _parse_xml(path: Path) -> ET.Element:
    if not path.exists():
        raise FileNotFoundError(f"No dictionary file at {path}")
    try:
        return ET.parse(path).getroot()
    except ET.ParseError as e:
        raise ValueError(f"Malformed XML in {path}: {e}") from e


def _children_text(node: ET.Element) -> dict[str, str]:
    return {child.tag: (child.text or "") for child in node}


def load_hanja(paths: Union[str, Path, Iterable[Union[str, Path]]]) -> list[HanjaEntry]:
    """
    Load one or more hanja XML files into a single ordered dictionary.

    Excluded glyphs, entries without glyph/reading/element and exact
    (glyph, reading) repeats are dropped.
    """
    if isinstance(paths, (str, Path)):
        paths = [paths]

    entries = []
    seen = set()
    for path in map(Path, paths):
        root = _parse_xml(path)
        kept = 0
        for node in root.iter("hanja"):
            record = _children_text(node)
            try:
                entry = HanjaEntry.from_record(record)
            except ValueError as e:
                logger.debug("Skipping hanja record %r: %s", record.get("char"), e)
                continue
            if not entry.is_valid or entry.character in EXCLUDED_CHARS:
                logger.debug("Skipping hanja record %r", record.get("char"))
                continue
            key = (entry.character, entry.reading)
            if key in seen:
                continue
            seen.add(key)
            entries.append(entry)
            kept += 1
        logger.info("Loaded %d hanja from %s", kept, path)
    return entries


def load_surnames(path: Union[str, Path]) -> dict[str, list[SurnameHanja]]:
    """Load surname XML (<entry><reading/><char/><meaning/></entry>) into reading -> glyphs."""
    root = _parse_xml(Path(path))
    surnames = {}
    for node in root.iter("entry"):
        record = _children_text(node)
        reading = record.get("reading", "").strip()
        if not reading:
            continue
        surnames.setdefault(reading, []).append(
            SurnameHanja(record.get("char", "").strip(), record.get("meaning", "").strip())
        )
    logger.info("Loaded %d surname readings from %s", len(surnames), path)
    return surnames


def surname_hanja(surnames: Mapping[str, list[SurnameHanja]], reading: str) -> list[SurnameHanja]:
    reading = (reading or "").strip()
    if not reading or not surnames:
        return []
    return list(surnames.get(reading, []))
