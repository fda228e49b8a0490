import pytest

from jakmyeong.bazi import Element, Polarity
from jakmyeong.hangul import Era
from jakmyeong.hanja import GenderAffinity, HanjaEntry

W, F, E, M, R = Element.WOOD, Element.FIRE, Element.EARTH, Element.METAL, Element.WATER
YANG, YIN = Polarity.YANG, Polarity.YIN
NEU, MALE, FEM = GenderAffinity.NEUTRAL, GenderAffinity.MALE, GenderAffinity.FEMALE

# (char, reading, element, secondary, strokes, polarity, meaning, gender, era)
ENTRIES = [
    ("東", "동", W, None, 8, YANG, "동녘 동", MALE, Era.ALL),
    ("榮", "영", W, F, 14, YANG, "영화 영", NEU, Era.TRADITIONAL),
    ("彬", "빈", W, None, 11, YIN, "빛날 빈", NEU, Era.NEW),
    ("柱", "주", W, None, 9, YIN, "기둥 주", MALE, Era.MID),
    ("炫", "현", F, None, 9, YANG, "밝을 현", NEU, Era.NEW),
    ("昊", "호", F, None, 8, YANG, "하늘 호", MALE, Era.LATEST),
    ("燦", "찬", F, None, 17, YIN, "빛날 찬", MALE, Era.MID),
    ("旼", "민", F, None, 8, YIN, "화할 민", NEU, Era.NEW),
    ("圭", "규", E, None, 6, YANG, "홀 규", MALE, Era.MID),
    ("允", "윤", E, None, 4, YANG, "진실로 윤", NEU, Era.LATEST),
    ("佳", "가", E, None, 8, YIN, "아름다울 가", FEM, Era.ALL),
    ("城", "성", E, None, 10, YANG, "재 성", MALE, Era.TRADITIONAL),
    ("鉉", "현", M, None, 13, YANG, "솥귀 현", MALE, Era.MID),
    ("瑞", "서", M, None, 14, YIN, "상서 서", FEM, Era.LATEST),
    ("銀", "은", M, None, 14, YIN, "은 은", FEM, Era.NEW),
    ("錫", "석", M, None, 16, YANG, "주석 석", MALE, Era.TRADITIONAL),
    ("金", "김", M, None, 8, YANG, "쇠 금", NEU, Era.ALL),
    ("浩", "호", R, None, 11, YANG, "넓을 호", MALE, Era.NEW),
    ("潤", "윤", R, None, 16, YIN, "윤택할 윤", NEU, Era.LATEST),
    ("雨", "우", R, None, 8, YIN, "비 우", NEU, Era.ALL),
]


@pytest.fixture
def hanja_dictionary():
    """20 synthetic entries covering all five elements, with repeated readings."""
    return [
        HanjaEntry(
            character=char, reading=reading, primary_element=element,
            secondary_element=secondary, stroke_count=strokes, polarity=polarity,
            meaning=meaning, gender_affinity=gender, era_affinity=era,
        )
        for char, reading, element, secondary, strokes, polarity, meaning, gender, era in ENTRIES
    ]


@pytest.fixture
def by_char(hanja_dictionary):
    return {entry.character: entry for entry in hanja_dictionary}
