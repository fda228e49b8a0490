from dataclasses import FrozenInstanceError

import pytest

from jakmyeong.bazi import Element, Gender, Polarity
from jakmyeong.hanja import HanjaEntry
from jakmyeong.needs import ElementNeedProfile
from jakmyeong.scoring import (
    Criterion, ScoredCandidate, ScoringConfig, ScoringContext, Surname, build_explanation,
    deficient_match, element_score, gender_score, harmony_score, score_name, syllable_flow_score,
)

W, F, E, M, R = Element.WOOD, Element.FIRE, Element.EARTH, Element.METAL, Element.WATER

WEAK_WOOD = ElementNeedProfile(required_elements=(W, R), penalized_elements=(F, E, M))


def _ctx(gender=Gender.MALE, needs=WEAK_WOOD, surname="김", **kwargs):
    return ScoringContext(surname=Surname.parse(surname), needs=needs, gender=gender, **kwargs)


def test_config_defaults():
    config = ScoringConfig.create_default()
    assert config.top_k == 8
    assert config.ideal_strokes == 23
    assert config.weights[Criterion.ELEMENT] == 1.8
    assert config.weights[Criterion.HARMONY] == 0.5


def test_config_is_immutable():
    config = ScoringConfig.create_default()
    with pytest.raises(FrozenInstanceError):
        config.top_k = 3
    with pytest.raises(TypeError):
        config.weights[Criterion.ELEMENT] = 0.0


def test_config_copies():
    config = ScoringConfig.create_default()
    tuned = config.with_weights(element=2.5).with_top_k(3)
    assert tuned.weights[Criterion.ELEMENT] == 2.5
    assert tuned.top_k == 3
    assert config.weights[Criterion.ELEMENT] == 1.8
    assert config.top_k == 8


def test_surname_parse():
    assert Surname.parse("김") == Surname(reading="김")
    assert Surname.parse("金") == Surname(reading="", character="金")
    assert Surname.parse(" 남궁 ").display == "남궁"


def test_score_name_basic(by_char):
    result = score_name("김", by_char["浩"], by_char["彬"], WEAK_WOOD, "male")
    assert result.full_name == "김호빈"
    assert result.total_strokes == 22
    assert result.scores["element"] == 4.5
    assert result.deficient_match == 2.0
    assert Criterion.BIRTH_ORDER.value not in result.scores
    assert all(0.0 <= v <= 5.0 for v in result.scores.values())
    assert 0.0 <= result.final_score <= 5.0
    assert result.final_score == round(result.final_score, 3)
    assert result.explanation == "목 기운 보완, 수 기운 보완"


def test_penalized_elements_clamp_to_zero(by_char):
    result = score_name("김", by_char["炫"], by_char["佳"], WEAK_WOOD, "male")
    assert result.scores["element"] == 0.0
    assert result.deficient_match == 0
    assert result.explanation == "균형 잡힌 이름"


def test_no_birth_year_gives_neutral_era_and_ending(by_char):
    result = score_name("김", by_char["浩"], by_char["彬"], WEAK_WOOD, "male")
    assert result.scores["era_phonology"] == 2.5
    assert result.scores["ending_sound"] == 2.5


def test_birth_year_drives_era_criteria(by_char):
    result = score_name("김", by_char["浩"], by_char["彬"], WEAK_WOOD, "male", birth_year=1995)
    assert result.scores["era_phonology"] != 2.5


def test_final_is_weighted_mean(by_char):
    only_element = ScoringConfig.create_default().with_weights(
        ending_sound=0, syllable_flow=0, era_phonology=0, gender=0, harmony=0,
    )
    result = score_name("김", by_char["浩"], by_char["彬"], WEAK_WOOD, "male", config=only_element)
    assert result.final_score == 4.5


def test_deficient_match_counts_secondary_once(by_char):
    fire = ElementNeedProfile(required_elements=(F,))
    # 榮 is wood with a fire secondary
    assert deficient_match(by_char["榮"], by_char["東"], fire) == 0.5
    assert deficient_match(by_char["榮"], by_char["燦"], fire) == 1.0


@pytest.mark.parametrize("first, second, gender, expected", [
    ("東", "昊", Gender.MALE, 5.0),
    ("東", "彬", Gender.MALE, 4.0),
    ("彬", "旼", Gender.MALE, 3.0),
    ("東", "佳", Gender.MALE, 2.0),
    ("東", "昊", Gender.FEMALE, 0.75),
    ("瑞", "銀", Gender.FEMALE, 5.0),
])
def test_gender_fit(by_char, first, second, gender, expected):
    assert gender_score(by_char[first], by_char[second], _ctx(gender)) == expected


@pytest.mark.parametrize("first, second, expected", [
    ("東", "浩", 4.0),   # 19 strokes, both yang
    ("瑞", "彬", 4.5),   # 25 strokes, both yin
    ("燦", "錫", 3.5),   # 33 strokes, yin + yang
    ("允", "圭", 2.0),   # 10 strokes, both yang
    ("城", "錫", 4.0),   # 26 strokes, both yang
])
def test_harmony(by_char, first, second, expected):
    assert harmony_score(by_char[first], by_char[second], _ctx()) == expected


def test_harmony_sweet_band_and_balance():
    a = HanjaEntry("甲", "갑", W, stroke_count=11, polarity=Polarity.YANG)
    b = HanjaEntry("乙", "을", W, stroke_count=12, polarity=Polarity.YIN)
    assert harmony_score(a, b, _ctx()) == 5.0


def test_harmony_identical_meaning():
    a = HanjaEntry("光", "광", F, stroke_count=10, meaning="빛 광")
    b = HanjaEntry("洸", "황", R, stroke_count=10, meaning="빛 광")
    assert harmony_score(a, b, _ctx()) == 3.5


def test_syllable_flow(by_char):
    # 김호빈: two codas in total, no collisions
    assert syllable_flow_score(by_char["浩"], by_char["彬"], _ctx()) == pytest.approx(3.2)


def test_syllable_flow_noun_collision():
    go = HanjaEntry("高", "고", F)
    gi = HanjaEntry("基", "기", E)
    assert syllable_flow_score(go, gi, _ctx()) == 0.2


def test_syllable_flow_hard_coda_into_strong_onset():
    seok = HanjaEntry("錫", "석", M)
    ju = HanjaEntry("柱", "주", W)
    ho = HanjaEntry("浩", "호", R)
    # 이석주 vs 이석호: ㄱ into ㅈ collides, ㄱ into ㅎ does not
    assert syllable_flow_score(seok, ju, _ctx(surname="이")) < syllable_flow_score(seok, ho, _ctx(surname="이"))


def test_birth_order_criterion(by_char):
    won = HanjaEntry("元", "원", W, stroke_count=4)
    eldest = score_name("김", won, by_char["浩"], WEAK_WOOD, "male", birth_order=1)
    second = score_name("김", won, by_char["浩"], WEAK_WOOD, "male", birth_order=2)
    assert eldest.scores["birth_order"] == 5.0
    assert second.scores["birth_order"] == 2.0
    assert eldest.final_score > second.final_score


def test_build_explanation(by_char):
    assert build_explanation(by_char["浩"], by_char["雨"], (W, R)) == "수 기운 보완"


def test_candidate_to_dict(by_char):
    data = score_name("김", by_char["浩"], by_char["彬"], WEAK_WOOD, "male").to_dict()
    assert data["full_name"] == "김호빈"
    assert data["hanja"] == "浩彬"
    assert set(data["scores"]) == {
        "element", "ending_sound", "syllable_flow", "era_phonology", "gender", "harmony",
    }


YIN_LEANING = {Polarity.YANG: 1, Polarity.YIN: 3}
YANG_LEANING = {Polarity.YANG: 3, Polarity.YIN: 1}


@pytest.mark.parametrize("first, second, chart_polarity, expected", [
    ("東", "浩", None, 4.0),
    ("東", "浩", YIN_LEANING, 4.4),     # two yang offset a yin chart
    ("東", "浩", YANG_LEANING, 4.0),
    ("彬", "雨", YANG_LEANING, 4.4),    # two yin offset a yang chart
    ("彬", "雨", YIN_LEANING, 4.0),
    ("彬", "雨", {Polarity.YANG: 2, Polarity.YIN: 2}, 4.0),
    ("東", "潤", YIN_LEANING, 4.5),     # mixed pair keeps the balance bonus only
])
def test_element_score_chart_polarity(by_char, first, second, chart_polarity, expected):
    ctx = _ctx(chart_polarity=chart_polarity)
    assert element_score(by_char[first], by_char[second], ctx) == pytest.approx(expected)


def test_chart_polarity_bonus_stays_clamped(by_char):
    needs = ElementNeedProfile(required_elements=(W, R, F, M))
    both_secondary = HanjaEntry(
        character="澔", reading="호", primary_element=R, secondary_element=F,
        stroke_count=15, polarity=Polarity.YANG,
    )
    ctx = _ctx(needs=needs, chart_polarity=YIN_LEANING)
    # 2 + 2 + 1 + 0.4 would pass the ceiling
    assert element_score(by_char["東"], both_secondary, ctx) == 5.0


def test_score_name_passes_chart_polarity(by_char):
    plain = score_name("김", by_char["東"], by_char["浩"], WEAK_WOOD, "male")
    leaning = score_name("김", by_char["東"], by_char["浩"], WEAK_WOOD, "male",
                         chart_polarity=YIN_LEANING)
    assert plain.scores["element"] == 4.0
    assert leaning.scores["element"] == pytest.approx(4.4)
    assert leaning.final_score > plain.final_score


def _candidate(by_char, ending, flow, strokes, deficient=1.0, final=3.0):
    scores = {c.value: 3.0 for c in Criterion if c is not Criterion.BIRTH_ORDER}
    scores[Criterion.ENDING_SOUND.value] = ending
    scores[Criterion.SYLLABLE_FLOW.value] = flow
    return ScoredCandidate(
        surname=Surname.parse("김"), char1=by_char["東"], char2=by_char["浩"],
        full_name="김동호", scores=scores, final_score=final,
        deficient_match=deficient, total_strokes=strokes, explanation="",
    )


def test_tie_break_keys(by_char):
    candidate = _candidate(by_char, ending=4.0, flow=3.5, strokes=27)
    assert candidate.tie_break_keys() == (1.0, 4.0, 3.5, 4)
    assert candidate.tie_break_keys(ideal_strokes=30) == (1.0, 4.0, 3.5, 3)
