"""Synthetic NHS Digital extracts written into a temporary raw-data folder."""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path

import pytest

from gpcompare import practice_data

WORKFORCE_CSV = """\
PRAC_CODE,PRAC_NAME,POSTCODE,PCN_CODE,PCN_NAME,ICB_CODE,ICB_NAME,SUB_ICB_CODE,SUB_ICB_NAME,REGION_CODE,REGION_NAME,TOTAL_PATIENTS,TOTAL_GP_FTE,TOTAL_NURSES_FTE,TOTAL_ADMIN_FTE,TOTAL_DPC_FTE
A81001,Alpha Surgery,ts1 2ab,U001,North Tees PCN,QHM,North East ICB,00K,Tees,Y63,North East and Yorkshire,"8,000",4,2,6.5,1
A81002,Beta Medical Centre,TS2 3CD,U001,North Tees PCN,QHM,North East ICB,00K,Tees,Y63,North East and Yorkshire,9500,5,3,7,*
A81003,Gamma Practice,TS3 4EF,U001,North Tees PCN,QHM,North East ICB,00K,Tees,Y63,North East and Yorkshire,15000,6,4,8,2
A81004,Delta Health,TS4 5GH,U002,South Tees PCN,QHM,North East ICB,00K,Tees,Y63,North East and Yorkshire,5000,0,1,2,0
B12,Broken Code,TS5 6IJ,U002,South Tees PCN,QHM,North East ICB,00K,Tees,Y63,North East and Yorkshire,4000,2,1,1,0
A81005,Empty List,TS6 7KL,U002,South Tees PCN,QHM,North East ICB,00K,Tees,Y63,North East and Yorkshire,0,1,1,1,0
A81006,Epsilon Surgery,TS7 8MN,,,,,16C,Tees Valley,Y63,North East and Yorkshire,*,3,1,2,0
"""

REGISTRATION_CSV = """\
PUBLICATION,EXTRACT_DATE,TYPE,CODE,POSTCODE,SEX,AGE,NUMBER_OF_PATIENTS
GP_PRAC_PAT_LIST,01NOV2025,GP,A81001,TS1 2AB,ALL,ALL,8000
GP_PRAC_PAT_LIST,01NOV2025,GP,A81001,TS1 2AB,MALE,ALL,3900
GP_PRAC_PAT_LIST,01NOV2025,GP,A81002,TS2 3CD,ALL,ALL,"10,000"
GP_PRAC_PAT_LIST,01NOV2025,GP,A81003,TS3 4EF,ALL,ALL,16000
GP_PRAC_PAT_LIST,01NOV2025,GP,A81003,TS3 4EF,ALL,0_4,900
GP_PRAC_PAT_LIST,01NOV2025,GP,A81006,TS7 8MN,ALL,ALL,7000
"""

ORG_REFERENCE_CSV = """\
PRACTICE_CODE,PRACTICE_NAME,REVISED_MAX_POINTS
A81001,Alpha Surgery,550
A81002,Beta Medical Centre,0
"""

ACHIEVEMENT_NE_CSV = """\
PRACTICE_CODE,INDICATOR_CODE,MEASURE,VALUE
A81001,AF006,ACHIEVED_POINTS,300
A81001,AF006,REGISTER,999
A81002,AF006,ACHIEVED_POINTS,500.4
"""

ACHIEVEMENT_LON_CSV = """\
PRACTICE_CODE,INDICATOR_CODE,MEASURE,VALUE
A81001,AST007,ACHIEVED_POINTS,242
A81003,AST007,ACHIEVED_POINTS,*
"""

WORKFORCE_NAME = "GP Workforce November 2025 Practice Level - Detailed.csv"


def write_csv(folder: Path, name: str, content: str) -> Path:
    path = folder / name
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture
def raw_dir(tmp_path: Path) -> Path:
    """Complete set of extracts."""
    folder = tmp_path / "raw-data"
    folder.mkdir()
    write_csv(folder, WORKFORCE_NAME, WORKFORCE_CSV)
    write_csv(folder, "gp-reg-pat-prac-all.csv", REGISTRATION_CSV)
    write_csv(folder, "QOF_2425_ORGANISATION_REFERENCE.csv", ORG_REFERENCE_CSV)
    write_csv(folder, "ACHIEVEMENT_NE.csv", ACHIEVEMENT_NE_CSV)
    write_csv(folder, "ACHIEVEMENT_LON.csv", ACHIEVEMENT_LON_CSV)
    return folder


@pytest.fixture
def workforce_only_dir(tmp_path: Path) -> Path:
    """Only the required workforce extract."""
    folder = tmp_path / "raw-data"
    folder.mkdir()
    write_csv(folder, WORKFORCE_NAME, WORKFORCE_CSV)
    return folder


@pytest.fixture(autouse=True)
def _reset_gpcompare_logger():
    yield
    logger = logging.getLogger("gpcompare")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _fresh_practice_data_cache():
    practice_data.clear_cache()
    yield
    practice_data.clear_cache()
