from datetime import date

import pandas as pd
import pytest

from noaa_isd.exceptions import InvalidDateRange, StationNotAvailable
from noaa_isd.stations import StationResolver, load_station_history, to_utc_timestamp

from conftest import STATION_HISTORY


@pytest.fixture
def resolver(station_csv):
    return StationResolver.from_csv(station_csv)


class TestLoadStationHistory:
    def test_identifiers_stay_strings(self, station_csv):
        df = load_station_history(station_csv)
        assert df["USAF"].iloc[1] == "999999"
        assert df["WBAN"].iloc[0] == "24233"

    def test_types(self, station_csv):
        df = load_station_history(station_csv)
        assert df["BEGIN"].iloc[0] == pd.Timestamp("1973-01-01", tz="UTC")
        assert df["LAT"].iloc[0] == pytest.approx(47.444)


class TestResolve:
    def test_single_period(self, resolver):
        assert resolver.resolve_station_id("KBFI", "2016-03-01", "2016-03-07") == "72793524234"

    def test_overlapping_periods_pick_latest_end(self, resolver):
        record = resolver.resolve("KSEA", "2000-01-01", "2000-12-31")
        assert record.station_id == "72793024233"
        assert record.end == pd.Timestamp("2025-08-24", tz="UTC")

    def test_only_covering_period(self, resolver):
        assert resolver.resolve_station_id("KSEA", date(1960, 1, 1), date(1960, 1, 31)) == "99999924233"

    def test_end_day_is_covered(self, resolver):
        assert resolver.resolve_station_id("KSEA", "2025-08-24T00:00", "2025-08-24T23:00") == "72793024233"

    def test_no_period_covers_range(self, resolver):
        with pytest.raises(StationNotAvailable):
            resolver.resolve("KSEA", "1960-01-01", "2010-01-01")

    def test_single_period_not_covering(self, resolver):
        with pytest.raises(StationNotAvailable):
            resolver.resolve("KBFI", "2025-08-01", "2025-09-30")

    def test_unknown_station(self, resolver):
        with pytest.raises(StationNotAvailable):
            resolver.resolve("KXYZ", "2016-03-01", "2016-03-07")

    def test_invalid_range(self, resolver):
        with pytest.raises(InvalidDateRange):
            resolver.resolve("KSEA", "2016-03-07", "2016-03-01")

    def test_lowercase_icao(self, resolver):
        assert resolver.resolve("kbfi", "2016-03-01", "2016-03-01").icao == "KBFI"

    def test_deterministic(self, resolver):
        ids = {resolver.resolve_station_id("KSEA", "2000-01-01", "2000-01-02") for _ in range(5)}
        assert ids == {"72793024233"}

    @pytest.mark.parametrize("icao", ["", "  "])
    def test_blank_icao(self, tmp_path, icao):
        # Buoys and ships carry no ICAO code in the station history
        path = tmp_path / "isd-history.csv"
        path.write_text(
            STATION_HISTORY
            + '"999999","41001","EAST HATTERAS BUOY","US","NC","","+34.700","-72.700","+0000.0","19760101","20250824"\n'
        )
        resolver = StationResolver.from_csv(str(path))
        with pytest.raises(StationNotAvailable):
            resolver.resolve(icao, "2016-03-01", "2016-03-07")


class TestFindStations:
    def test_name_contains(self, resolver):
        assert resolver.find_stations(name_contains="boeing")["ICAO"].tolist() == ["KBFI"]

    def test_state(self, resolver):
        assert len(resolver.find_stations(state="wa")) == 3


def test_to_utc_timestamp_converts_aware_values():
    ts = to_utc_timestamp(pd.Timestamp("2016-03-01T00:00", tz="America/Los_Angeles"))
    assert ts == pd.Timestamp("2016-03-01T08:00", tz="UTC")
