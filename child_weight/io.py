from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import numpy as np


AGE_CANDIDATES = ("age",)
SEX_CANDIDATES = ("sex", "gender")
BMI_CANDIDATES = ("bmi_cat", "bmicat", "bmi_category", "bmi")
FFM_CANDIDATES = ("ffm", "fat_free_mass", "fatfreemass")
FM_CANDIDATES = ("fm", "fat_mass", "fatmass")

_SEX_WORDS = {"male": 0.0, "m": 0.0, "female": 1.0, "f": 1.0}


@dataclass
class CohortTable:
    age: list[float]
    sex: list[float]
    bmi_category: list[str]
    fat_free_mass: list[float]
    fat_mass: list[float]


def _detect_delimiter(header_line: str) -> str:
    semicolons = header_line.count(";")
    commas = header_line.count(",")
    return ";" if semicolons >= commas and semicolons > 0 else ","


def _parse_number(s: str) -> float:
    return float(s.strip().replace(",", "."))


def _parse_sex(s: str) -> float:
    key = s.strip().lower()
    if key in _SEX_WORDS:
        return _SEX_WORDS[key]
    return _parse_number(key)


def _read_lines(path: Path) -> list[str]:
    text = path.read_text(encoding="utf-8", errors="ignore")
    return [l.strip() for l in text.splitlines() if l.strip() and not l.strip().startswith("#")]


def _find_col(headers: list[str], candidates: Iterable[str]) -> int:
    # Prefix match ("ffm_kg", "age_years"); exact matches win.
    candidates = [c.lower() for c in candidates]
    for c in candidates:
        if c in headers:
            return headers.index(c)
    for i, h in enumerate(headers):
        for c in candidates:
            if h.startswith(c):
                return i
    return -1


def parse_cohort_csv(path: Path) -> CohortTable:
    """Read one individual per row: age, sex, bmi category, FFM (kg), FM (kg)."""
    lines = _read_lines(path)
    if not lines:
        raise ValueError(f"Empty cohort file: {path.name}")

    delimiter = _detect_delimiter(lines[0])
    headers = [h.strip().lower() for h in lines[0].split(delimiter)]

    cols = {
        "age": _find_col(headers, AGE_CANDIDATES),
        "sex": _find_col(headers, SEX_CANDIDATES),
        "bmi_category": _find_col(headers, BMI_CANDIDATES),
        "fat_free_mass": _find_col(headers, FFM_CANDIDATES),
        "fat_mass": _find_col(headers, FM_CANDIDATES),
    }
    missing = [k for k, v in cols.items() if v == -1]
    if missing:
        raise ValueError(f"Missing columns in {path.name}: {', '.join(missing)}")

    table = CohortTable(age=[], sex=[], bmi_category=[], fat_free_mass=[], fat_mass=[])
    for lineno, line in enumerate(lines[1:], start=2):
        parts = line.split(delimiter)
        if len(parts) <= max(cols.values()):
            raise ValueError(f"{path.name}:{lineno}: expected {len(headers)} fields, got {len(parts)}")
        try:
            table.age.append(_parse_number(parts[cols["age"]]))
            table.sex.append(_parse_sex(parts[cols["sex"]]))
            table.fat_free_mass.append(_parse_number(parts[cols["fat_free_mass"]]))
            table.fat_mass.append(_parse_number(parts[cols["fat_mass"]]))
        except ValueError as e:
            raise ValueError(f"{path.name}:{lineno}: {e}") from e
        table.bmi_category.append(parts[cols["bmi_category"]].strip())

    if not table.age:
        raise ValueError(f"No individuals found in {path.name}")
    return table


def parse_intake_csv(path: Path) -> np.ndarray:
    """
    Intake schedule in kcal/day: one row per individual, one column per time step.
    A non-numeric first row is treated as a header and skipped.
    """
    lines = _read_lines(path)
    if not lines:
        raise ValueError(f"Empty intake file: {path.name}")

    delimiter = _detect_delimiter(lines[0])
    rows: list[list[float]] = []
    for lineno, line in enumerate(lines, start=1):
        parts = [p for p in line.split(delimiter) if p.strip()]
        try:
            rows.append([_parse_number(p) for p in parts])
        except ValueError:
            if lineno == 1:
                continue
            raise ValueError(f"{path.name}:{lineno}: non-numeric intake value") from None

    if not rows:
        raise ValueError(f"No intake rows found in {path.name}")
    widths = {len(r) for r in rows}
    if len(widths) != 1:
        raise ValueError(f"Ragged intake table in {path.name}: row widths {sorted(widths)}")
    return np.asarray(rows, dtype=float)
