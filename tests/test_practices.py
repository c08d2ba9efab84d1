"""Loading the extracts and joining them into practice records."""

from __future__ import annotations

import pytest

from gpcompare import gppatientregister, qof, workforce
from gpcompare.practices import PRACTICE_COLUMNS, build_lookup, join_practices, patients_per_gp
from gpcompare.utils import find_file


def _join(folder):
    wf = workforce.load_workforce(find_file(folder, workforce.FILE_PATTERN))
    patients = gppatientregister.load_registration_map(find_file(folder, gppatientregister.FILE_PATTERN))
    max_points = qof.load_max_points_map(find_file(folder, qof.ORG_REFERENCE_PATTERN))
    achievement = qof.load_achievement_map(qof.find_achievement_files(folder))
    return join_practices(wf, patients, max_points, achievement)


def test_registration_uses_all_sexes_all_ages_only(raw_dir) -> None:
    patients = gppatientregister.load_registration_map(raw_dir / "gp-reg-pat-prac-all.csv")
    assert patients == {"A81001": 8000.0, "A81002": 10000.0, "A81003": 16000.0, "A81006": 7000.0}


def test_missing_optional_sources_give_empty_maps() -> None:
    assert gppatientregister.load_registration_map(None) == {}
    assert qof.load_max_points_map(None) == {}
    assert qof.load_achievement_map([]) == {}


def test_achievement_summed_across_files(raw_dir) -> None:
    files = qof.find_achievement_files(raw_dir)
    assert [f.name for f in files] == ["ACHIEVEMENT_LON.csv", "ACHIEVEMENT_NE.csv"]
    points = qof.load_achievement_map(files)
    assert points["A81001"] == pytest.approx(542.0)
    assert points["A81002"] == pytest.approx(500.4)
    assert points["A81003"] == 0.0


def test_workforce_is_required(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        workforce.load_workforce(find_file(tmp_path, workforce.FILE_PATTERN))


def test_workforce_normalisation(raw_dir) -> None:
    wf = workforce.load_workforce(find_file(raw_dir, workforce.FILE_PATTERN)).set_index("code")
    assert wf.loc["A81001", "postcode"] == "TS1 2AB"
    assert wf.loc["A81001", "workforcePatients"] == 8000.0
    assert wf.loc["A81002", "wteDPC"] == 0.0
    assert wf.loc["A81006", "icbCode"] == "16C"
    assert wf.loc["A81006", "icbName"] == "Tees Valley"
    assert wf.loc["A81006", "pcnCode"] == ""
    assert wf.loc["A81006", "pcnName"] == "Unknown PCN"


def test_join_skips_bad_codes_and_empty_lists(raw_dir) -> None:
    practices, skipped = _join(raw_dir)
    assert skipped == 2
    assert practices["code"].tolist() == ["A81001", "A81002", "A81003", "A81004", "A81006"]
    assert list(practices.columns) == PRACTICE_COLUMNS


def test_join_values(raw_dir) -> None:
    practices, _ = _join(raw_dir)
    p = practices.set_index("code")

    # registration beats the workforce total; workforce total used when absent
    assert p.loc["A81003", "listSize"] == 16000
    assert p.loc["A81004", "listSize"] == 5000
    assert p.loc["A81006", "listSize"] == 7000

    assert p.loc["A81001", "qofPoints"] == 542
    assert p.loc["A81001", "qofMaxPoints"] == 550
    assert p.loc["A81002", "qofPoints"] == 500
    # zero or missing ceiling falls back to the default
    assert p.loc["A81002", "qofMaxPoints"] == 564
    assert p.loc["A81003", "qofMaxPoints"] == 564

    assert p.loc["A81001", "patientsPerGP"] == 2000
    assert p.loc["A81003", "patientsPerGP"] == 2667
    assert p.loc["A81004", "patientsPerGP"] == 0

    assert p.loc["A81001", "estimatedIncome"] == 1296536
    # income uses the unrounded 500.4 points
    assert p.loc["A81002", "estimatedIncome"] == 1580735
    assert p.loc["A81004", "estimatedIncome"] == 733950

    assert p.loc["A81001", "dnaRate"] == 0
    assert p.loc["A81001", "appointments"] == 0


def test_join_with_workforce_only(workforce_only_dir) -> None:
    practices, skipped = _join(workforce_only_dir)
    assert skipped == 3
    assert practices["listSize"].tolist() == [8000, 9500, 15000, 5000]
    assert (practices["qofPoints"] == 0).all()
    assert (practices["qofMaxPoints"] == 564).all()


def test_lookup_projection(raw_dir) -> None:
    practices, _ = _join(raw_dir)
    lookup = build_lookup(practices)
    assert len(lookup) == 5
    assert lookup[0] == {"code": "A81001", "name": "Alpha Surgery", "postcode": "TS1 2AB"}


def test_patients_per_gp() -> None:
    assert patients_per_gp(10000, 4) == 2500
    assert patients_per_gp(10000, 3) == 3333
    assert patients_per_gp(10000, 0) == 0
    assert patients_per_gp(10000, -1) == 0
    assert patients_per_gp(10000, float("nan")) == 0
