import os
import sys

import pytest

# Add project root so the package imports without installation
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

STATION_HISTORY = """\
"USAF","WBAN","STATION NAME","CTRY","STATE","ICAO","LAT","LON","ELEV(M)","BEGIN","END"
"727930","24233","SEATTLE-TACOMA INTERNATIONAL A","US","WA","KSEA","+47.444","-122.314","+0112.8","19730101","20250824"
"999999","24233","SEATTLE TACOMA AIRPORT","US","WA","KSEA","+47.450","-122.300","+0137.0","19480101","20051231"
"727935","24234","BOEING FIELD/KING COUNTY INTL","US","WA","KBFI","+47.530","-122.301","+0005.5","19480101","20250824"
"""


def make_record(date, **overrides):
    """Builds one raw record as returned by the data service."""
    record = {
        "DATE": date,
        "STATION": "72793024233",
        "NAME": "SEATTLE TACOMA AIRPORT, WA US",
        "REPORT_TYPE": "FM-15",
        "SOURCE": "7",
        "QUALITY_CONTROL": "V020",
        "WND": "160,1,N,0046,1",
        "CIG": "22000,1,9,N",
        "VIS": "016093,1,9,9",
        "TMP": "+0094,1",
        "DEW": "+0050,1",
        "SLP": "10173,1",
    }
    record.update(overrides)
    return record


@pytest.fixture
def raw_records():
    """Three hourly records, deliberately out of chronological order."""
    return [
        make_record("2016-03-01T02:53:00", TMP="+0150,1"),
        make_record("2016-03-01T00:53:00"),
        make_record("2016-03-01T01:53:00", WND="090,1,N,0050,1", TMP="+9999,9"),
    ]


@pytest.fixture
def station_csv(tmp_path):
    """Writes a small isd-history.csv and returns its path."""
    path = tmp_path / "isd-history.csv"
    path.write_text(STATION_HISTORY)
    return str(path)
