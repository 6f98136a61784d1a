"""
Station lookup against the ISD station history file (isd-history.csv).
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

import pandas as pd

from .exceptions import InvalidDateRange, StationNotAvailable

DateLike = Union[str, date, datetime, pd.Timestamp]

STATION_LIST_URL = 'https://www.ncei.noaa.gov/pub/data/noaa/isd-history.csv'


@dataclass(frozen=True)
class StationRecord:
    """One station period from the ISD station history."""

    icao: str
    station_id: str
    name: str
    country: str
    state: str
    latitude: float
    longitude: float
    elevation: float
    begin: pd.Timestamp
    end: pd.Timestamp


def to_utc_timestamp(value: DateLike) -> pd.Timestamp:
    """Converts a date, datetime or string to a UTC timestamp. Naive values are taken as UTC."""
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        return ts.tz_localize('UTC')
    return ts.tz_convert('UTC')


def validate_date_range(begin: DateLike, end: DateLike):
    """Returns the range as UTC timestamps, raising InvalidDateRange if begin is after end."""
    begin_ts, end_ts = to_utc_timestamp(begin), to_utc_timestamp(end)
    if begin_ts > end_ts:
        raise InvalidDateRange(f"Begin date {begin_ts.isoformat()} is later than end date {end_ts.isoformat()}.")
    return begin_ts, end_ts


class StationResolver:
    """
    Resolves ICAO codes to the USAF/WBAN identifiers used by the data service.

    The station history holds one row per station period; an ICAO code can
    map to several periods (e.g. after a station move), each with its own
    USAF/WBAN identifier and [BEGIN, END] validity interval.

    Attributes:
        stations (pd.DataFrame): The station history, one row per station period.
    """

    def __init__(self, stations: pd.DataFrame, logger: Optional[logging.Logger] = None):
        """
        Args:
            stations (pd.DataFrame): Station history as loaded by `load_station_history`.
            logger (logging.Logger, optional): Logger for output. Defaults to the module logger.
        """
        self.stations = stations
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_csv(cls, path: str, logger: Optional[logging.Logger] = None) -> 'StationResolver':
        return cls(load_station_history(path), logger)

    def find_stations(
        self,
        icao: Optional[str] = None,
        name_contains: Optional[str] = None,
        country: Optional[str] = None,
        state: Optional[str] = None,
    ) -> pd.DataFrame:
        """
        Finds station periods based on metadata criteria.

        Args:
            icao (str, optional): Exact ICAO code, e.g. 'KSEA'.
            name_contains (str, optional): Case-insensitive substring of the station name.
            country (str, optional): 2-letter FIPS country code.
            state (str, optional): 2-letter state abbreviation.

        Returns:
            pd.DataFrame: The matching rows of the station history.
        """
        filtered_df = self.stations
        if icao:
            filtered_df = filtered_df[filtered_df['ICAO'] == icao.upper()]
        if name_contains:
            filtered_df = filtered_df[
                filtered_df['STATION NAME'].str.contains(name_contains, case=False, regex=False, na=False)
            ]
        if country:
            filtered_df = filtered_df[filtered_df['CTRY'].str.upper() == country.upper()]
        if state:
            filtered_df = filtered_df[filtered_df['STATE'].str.upper() == state.upper()]
        return filtered_df.copy()

    def resolve(self, icao: str, begin: DateLike, end: DateLike) -> StationRecord:
        """
        Picks the station period that covers the whole requested range.

        Candidates are the periods of the ICAO code whose validity interval
        covers [begin, end], compared by day since the history has daily
        resolution. When several remain, the one with the latest END wins.

        Args:
            icao (str): The 4-letter ICAO code.
            begin: Start of the requested range.
            end: End of the requested range.

        Returns:
            StationRecord: The selected station period.

        Raises:
            InvalidDateRange: If begin is later than end.
            StationNotAvailable: If the ICAO code is blank or no period of the station
                covers the range.
        """
        begin_ts, end_ts = validate_date_range(begin, end)
        begin_day, end_day = begin_ts.normalize(), end_ts.normalize()

        if not icao or not icao.strip():
            raise StationNotAvailable("An ICAO code is required to resolve a station.")

        candidates = self.stations[self.stations['ICAO'] == icao.strip().upper()]
        if candidates.empty:
            raise StationNotAvailable(f"No station with ICAO code {icao!r} in the station history.")

        covering = candidates[(candidates['BEGIN'] <= begin_day) & (candidates['END'] >= end_day)]
        if covering.empty:
            raise StationNotAvailable(
                f"Station {icao} has no data for the whole range "
                f"{begin_day.date()} to {end_day.date()}."
            )
        if len(covering) > 1:
            self.logger.info(f"{len(covering)} station periods cover the range for {icao}; using the most recent.")

        row = covering.loc[covering['END'].idxmax()]
        record = StationRecord(
            icao=row['ICAO'],
            station_id=f"{row['USAF']}{row['WBAN']}",
            name=row['STATION NAME'],
            country=row['CTRY'],
            state=row['STATE'],
            latitude=row['LAT'],
            longitude=row['LON'],
            elevation=row['ELEV(M)'],
            begin=row['BEGIN'],
            end=row['END'],
        )
        self.logger.info(f"Resolved {icao} to station {record.station_id} ({record.name}).")
        return record

    def resolve_station_id(self, icao: str, begin: DateLike, end: DateLike) -> str:
        """Returns the USAF/WBAN identifier of the station period covering the range."""
        return self.resolve(icao, begin, end).station_id


def load_station_history(path: str) -> pd.DataFrame:
    """
    Loads isd-history.csv.

    Identifiers stay strings so leading zeros survive; BEGIN and END are
    parsed from yyyyMMdd as UTC.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df['BEGIN'] = pd.to_datetime(df['BEGIN'], format='%Y%m%d', utc=True)
    df['END'] = pd.to_datetime(df['END'], format='%Y%m%d', utc=True)
    for col in ['LAT', 'LON', 'ELEV(M)']:
        df[col] = pd.to_numeric(df[col], errors='coerce')
    return df
