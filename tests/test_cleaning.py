import pandas as pd
import pytest

from noaa_isd.cleaning import clean, summarize_failed_quality_codes
from noaa_isd.normalizer import normalize_observations

from conftest import make_record


@pytest.fixture
def observations():
    return normalize_observations([
        make_record("2016-03-01T00:53:00"),
        make_record("2016-03-01T01:53:00", WND="160,3,N,0046,1"),
        make_record("2016-03-01T02:53:00", TMP="+9999,9"),
        make_record("2016-03-01T03:53:00", REPORT_TYPE="SOD"),
        make_record("2016-03-01T04:53:00", CIG="22000,7,9,N"),
        make_record("2016-03-01T05:53:00", VIS="016093,2,9,9"),
        make_record("2016-03-01T06:53:00", WND="999,9,9,9999,9"),
        make_record("2016-03-01T07:53:00", CIG="99999,9,9,9", VIS="999999,9,9,9"),
    ])


class TestClean:
    def test_drops_spurious_rows(self, observations):
        cleaned = clean(observations)
        kept = [ts.strftime("%H:%M") for ts in cleaned.index]
        assert kept == ["00:53", "05:53", "07:53"]

    def test_failing_quality_code(self, observations):
        cleaned = clean(observations)
        assert not cleaned["WND_DIR_QC"].isin(["3", "7"]).any()
        assert not cleaned["CIG_HEIGHT_QC"].isin(["3", "7"]).any()

    def test_suspect_values_are_kept(self, observations):
        cleaned = clean(observations)
        assert cleaned.loc[pd.Timestamp("2016-03-01T05:53:00", tz="UTC"), "VIS_DIST_QC"] == "2"

    def test_missing_ceiling_is_not_required(self, observations):
        cleaned = clean(observations)
        assert pd.isna(cleaned.loc[pd.Timestamp("2016-03-01T07:53:00", tz="UTC"), "CIG_HEIGHT"])

    def test_input_is_not_modified(self, observations):
        before = observations.copy()
        clean(observations)
        pd.testing.assert_frame_equal(observations, before)

    def test_idempotent(self, observations):
        once = clean(observations)
        twice = clean(once)
        pd.testing.assert_frame_equal(once, twice)

    def test_custom_failing_codes(self, observations):
        cleaned = clean(observations, failing_codes={"2", "3", "7"})
        assert len(cleaned) == 2

    def test_empty_table(self):
        assert clean(normalize_observations([])).empty


class TestSummarizeFailedQualityCodes:
    def test_counts(self, observations):
        summary = summarize_failed_quality_codes(observations)
        assert summary["WND_DIR"] == 1
        assert summary["CIG_HEIGHT"] == 1
        assert summary["TMP"] == 0
        assert summary.index[0] in ("WND_DIR", "CIG_HEIGHT")
