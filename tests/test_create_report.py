import json

import pytest

from jakmyeong.create_report import compute_report, save_report
from jakmyeong.errors import InvalidInputError
from jakmyeong.run import main


def test_compute_report(hanja_dictionary):
    report = compute_report(
        surname="김", birth_date="1990-03-15", birth_time="10:00", gender="male",
        dictionary=hanja_dictionary,
    )
    assert set(report) == {"input", "chart", "structure", "needs", "recommendations"}
    assert report["chart"]["pillars"]["day"]["combined"] == "을사"
    assert report["structure"]["day_stem_strength"] == "weak"
    assert report["needs"]["required"] == ["wood", "water"]
    assert len(report["recommendations"]) == 8
    assert report["input"]["solar_time"] is None


def test_chart_only_skips_ranking():
    report = compute_report("김", "1990-03-15", "10", "female", chart_only=True)
    assert report["recommendations"] == []
    assert report["input"]["gender"] == "female"


def test_solar_time_moves_hour_pillar():
    # 11:10 clock time in Seoul is 10:37 local mean time: 오 hour becomes 사
    clock = compute_report("김", "1990-03-15", "11:10", "male", chart_only=True)
    solar = compute_report("김", "1990-03-15", "11:10", "male", chart_only=True,
                           latitude=37.5665, longitude=126.9780)
    assert clock["chart"]["pillars"]["hour"]["branch"]["hangul"] == "오"
    assert solar["chart"]["pillars"]["hour"]["branch"]["hangul"] == "사"
    assert solar["input"]["solar_time"]["timezone"] == "Asia/Seoul"


def test_solar_time_keeps_clock_time_on_chart():
    report = compute_report("김", "1990-03-15", "11:10", "male", chart_only=True,
                            latitude=37.5665, longitude=126.9780)
    assert report["chart"]["birth"]["hour"] == 11
    assert report["chart"]["birth"]["minute"] == 10
    assert report["input"]["solar_time"]["hour"] == 10
    assert report["input"]["solar_time"]["minute"] == 37


def test_report_chart_has_luck_pillars():
    report = compute_report("김", "1990-03-15", "10:00", "male", chart_only=True)
    luck = report["chart"]["luck_pillars"]
    assert len(luck) == 10
    assert luck[0]["combined"] == "갑인"
    assert luck[0]["range"] == "1-10"


def test_invalid_gender():
    with pytest.raises(InvalidInputError):
        compute_report("김", "1990-03-15", "10:00", "x", chart_only=True)


def test_missing_dictionary_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        compute_report("김", "1990-03-15", "10:00", "male", hanja_paths=[tmp_path / "none.xml"])


def test_save_report(tmp_path):
    report = compute_report("김", "1990-03-15", "10:00", "male", chart_only=True)
    path = save_report(report, tmp_path / "out" / "kim.json")
    text = path.read_text(encoding="utf-8")
    assert "을사" in text
    assert json.loads(text)["input"]["surname"] == "김"


def test_cli_chart_only(capsys):
    code = main([
        "--surname", "김", "--birth-date", "1990-03-15", "--birth-time", "10:00",
        "--gender", "male", "--chart-only",
    ])
    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert [report["chart"]["pillars"][p]["combined"] for p in ("year", "month", "day", "hour")] == [
        "경오", "을묘", "을사", "신사",
    ]


def test_cli_invalid_date(capsys):
    code = main([
        "--surname", "김", "--birth-date", "1990-02-30", "--birth-time", "10:00",
        "--gender", "male", "--chart-only",
    ])
    assert code == 2
    assert "error:" in capsys.readouterr().err


def test_cli_writes_output(tmp_path, capsys):
    out = tmp_path / "report.json"
    code = main([
        "--surname", "김", "--birth-date", "2015-06-01", "--birth-time", "08:30",
        "--gender", "female", "--chart-only", "--output", str(out),
    ])
    assert code == 0
    assert json.loads(out.read_text(encoding="utf-8"))["input"]["birth_date"] == "2015-06-01"
