"""
Report creation library.
Computes the saju chart, the elements a name should supply and the ranked
name candidates, and assembles them into one JSON-ready report.

Usage from Python:
    from jakmyeong.create_report import compute_report, save_report
    report = compute_report(
        surname="김", birth_date="2015-06-01", birth_time="10:30",
        gender="male", hanja_paths=["data/hanja.xml"],
        latitude=37.5665, longitude=126.9780,  # optional: LMT correction
    )
    save_report(report, "reports/kim.json")
"""

import json
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence, Union
import logging

from jakmyeong.astro_calendar import parse_birth_date, parse_birth_time, solar_time
from jakmyeong.bazi import Gender, analyze_structure, compute_chart
from jakmyeong.hanja import HanjaEntry, load_hanja, load_surnames, surname_hanja
from jakmyeong.needs import resolve_needs
from jakmyeong.recommend import rank
from jakmyeong.scoring import ScoringConfig

logger = logging.getLogger(__name__)


def compute_report(surname: str, birth_date, birth_time: str, gender: Union[Gender, str],
                   hanja_paths: Sequence[Union[str, Path]] = (),
                   dictionary: Optional[Sequence[HanjaEntry]] = None,
                   surname_path: Optional[Union[str, Path]] = None,
                   birth_order: Optional[int] = None,
                   name1: Optional[str] = None, name2: Optional[str] = None,
                   latitude: Optional[float] = None, longitude: Optional[float] = None,
                   config: Optional[ScoringConfig] = None,
                   chart_only: bool = False) -> dict:
    """
    Compute a full naming report.

    Args:
        surname: surname reading in Hangul, e.g. "김"
        birth_date: "YYYY-MM-DD" or date
        birth_time: "HH" or "HH:MM" (24h, local clock time)
        gender: "male" or "female"
        hanja_paths: dictionary XML files, ignored when `dictionary` is given
        dictionary: already-loaded entries
        surname_path: optional surname XML; its glyphs are kept out of names
        birth_order: 1 for the eldest
        name1, name2: preferred reading/glyph for each name slot
        latitude, longitude: birth place; when both are given the hour
            pillar uses local mean time instead of clock time
        config: scoring constants
        chart_only: skip dictionary loading and ranking

    Returns:
        dict with keys: input, chart, structure, needs, recommendations

    Raises:
        InvalidInputError: bad birth data or gender
        FileNotFoundError: a dictionary file is missing
    """
    day = parse_birth_date(birth_date)
    hour, minute = parse_birth_time(birth_time)
    sex = Gender.parse(gender)

    correction = None
    pillar_hour = hour
    if latitude is not None and longitude is not None:
        correction = solar_time(day, hour, minute, latitude, longitude)
        pillar_hour = correction["hour"]

    # the corrected hour only picks the hour pillar; the chart keeps the clock time
    chart = replace(compute_chart(day, pillar_hour, minute, sex), birth_hour=hour)
    structure = analyze_structure(chart)
    needs = resolve_needs(chart, structure)

    report = {
        "input": {
            "surname": surname,
            "birth_date": day.isoformat(),
            "birth_time_clock": birth_time,
            "gender": sex.value,
            "birth_order": birth_order,
            "name1": name1,
            "name2": name2,
            "solar_time": correction,
        },
        "chart": chart.to_dict(),
        "structure": structure.to_dict(),
        "needs": needs.to_dict(),
        "recommendations": [],
    }
    if chart_only:
        return report

    if dictionary is None:
        dictionary = load_hanja(hanja_paths) if hanja_paths else []
    glyphs = []
    if surname_path is not None:
        glyphs = surname_hanja(load_surnames(surname_path), surname)
        report["input"]["surname_hanja"] = [g.character for g in glyphs]

    candidates = rank(
        dictionary, surname, needs, sex,
        birth_year=day.year,
        birth_order=birth_order,
        name1=name1,
        name2=name2,
        config=config,
        surname_hanja=glyphs,
        chart_polarity=structure.polarity_counts,
    )
    report["recommendations"] = [c.to_dict() for c in candidates]
    return report


def save_report(report: dict, path: Union[str, Path]) -> Path:
    """Write the report as UTF-8 JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)
    logger.info("Report written to %s", path)
    return path
