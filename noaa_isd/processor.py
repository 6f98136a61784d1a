import concurrent.futures
import logging
import os
import sys
import urllib.error
from typing import Any, Dict, List, Optional

import pandas as pd

from .cleaning import clean as clean_observations
from .cleaning import summarize_failed_quality_codes
from .downloader import ISDDownloader
from .exceptions import StationNotAvailable
from .normalizer import normalize_observations
from .stations import DateLike, StationRecord, StationResolver, validate_date_range


class ISDProcessor:
    """
    A class to retrieve and quality-control hourly Integrated Surface Data (ISD).

    It resolves an ICAO code to the station period covering the requested
    dates, queries the NCEI Access Data Service through an ISDDownloader,
    and decodes the returned records into a UTC time-indexed table.

    Attributes:
        resolver (StationResolver): Station lookup over the ISD station history.
        qc_summary (pd.Series): Failing quality-code counts from the last `clean` call.
        failed_days (List[pd.Timestamp]): Days that could not be fetched by the last
            `fetch_observations_by_day` call.
    """

    def __init__(
        self,
        station_list_path: str = 'isd-history.csv',
        log_level: int = logging.INFO,
        download_timeout: int = 60,
        token: Optional[str] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initializes the processor by setting up its components and loading station metadata.

        Args:
            station_list_path (str): Path to the ISD station history CSV file.
                It is downloaded there when missing.
            log_level (int): The logging level for the logger (e.g., logging.INFO).
            download_timeout (int): Timeout in seconds for network operations.
            token (str, optional): NCEI access token. Defaults to the NOAA_TOKEN environment variable.
            max_workers (int, optional): Thread count for per-day fetches. Defaults to the
                ThreadPoolExecutor default.
        """
        self._setup_logger(log_level)
        if token is None:
            token = os.environ.get('NOAA_TOKEN')
        self.downloader = ISDDownloader(download_timeout, self.logger, token)

        self.station_list_path = station_list_path
        self._download_station_list_if_missing()
        self.resolver = self._load_station_resolver()

        self.max_workers = max_workers
        self.qc_summary = None
        self.failed_days: List[pd.Timestamp] = []

    # --- High-Level Public Methods ---

    def fetch_observations(
        self, station_icao: str, begin_date: DateLike, end_date: DateLike
    ) -> pd.DataFrame:
        """
        Retrieves hourly observations of a station with a single range query.

        Dates without a time of day are inclusive: the end date covers the whole day.

        Args:
            station_icao (str): The 4-letter ICAO code, e.g. 'KSEA'.
            begin_date: Start of the range in UTC.
            end_date: End of the range in UTC.

        Returns:
            pd.DataFrame: The normalized observation table.

        Raises:
            InvalidDateRange: If begin_date is later than end_date.
            StationNotAvailable: If no station period covers the range.
        """
        begin, end = validate_date_range(begin_date, end_date)
        station = self._resolve_station(station_icao, begin, end)

        records = self.downloader.fetch_records(station.station_id, begin, _inclusive_end(end))
        return normalize_observations(records)

    def fetch_observations_by_day(
        self, station_icao: str, begin_date: DateLike, end_date: DateLike
    ) -> pd.DataFrame:
        """
        Retrieves observations with one request per calendar day, using parallel threads.

        A day whose request fails on the network is logged, recorded in
        `failed_days`, and left out; the other days are still returned.
        The records of all days are decoded together once the requests are
        done, so decoding errors propagate to the caller.

        Args:
            station_icao (str): The 4-letter ICAO code.
            begin_date: First day of the range in UTC.
            end_date: Last day of the range in UTC.

        Returns:
            pd.DataFrame: The observations of all fetched days in chronological order.
        """
        begin, end = validate_date_range(begin_date, end_date)
        station = self._resolve_station(station_icao, begin, end)
        days = pd.date_range(begin.normalize(), end.normalize(), freq='D')

        self.failed_days = []
        records_by_day = {}
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_day = {executor.submit(self._fetch_day, station.station_id, day): day for day in days}
            for future in concurrent.futures.as_completed(future_to_day):
                day = future_to_day[future]
                try:
                    records_by_day[day] = future.result()
                except (urllib.error.URLError, TimeoutError, OSError) as exc:
                    self.failed_days.append(day)
                    self.logger.error(f'{day.date()} generated an exception: {exc}')

        self.failed_days.sort()
        all_records = [record for day in sorted(records_by_day) for record in records_by_day[day]]
        if not all_records:
            self.logger.warning(f"Could not retrieve any data for station {station_icao} for the specified days.")

        return normalize_observations(all_records)

    def clean(self, observations: pd.DataFrame) -> pd.DataFrame:
        """
        Removes unusable observations, recording a summary of failing quality codes.

        Args:
            observations (pd.DataFrame): A normalized observation table.

        Returns:
            pd.DataFrame: The cleaned table.
        """
        self.qc_summary = summarize_failed_quality_codes(observations)

        flagged_summary = self.qc_summary[self.qc_summary > 0]
        if not flagged_summary.empty:
            self.logger.info(f"Failing quality codes per variable:\n{flagged_summary.to_string()}")
        else:
            self.logger.info("No values with failing quality codes.")

        return clean_observations(observations)

    # --- Public Utility Methods ---

    def find_stations(self, **criteria) -> Optional[pd.DataFrame]:
        """Finds station periods by metadata, see `StationResolver.find_stations`."""
        if self.resolver is None:
            self.logger.warning("Station metadata not loaded. Cannot find stations.")
            return None
        return self.resolver.find_stations(**criteria)

    def get_variable_details(
        self, df: pd.DataFrame, variable_name: str
    ) -> pd.DataFrame:
        """
        Extracts all related columns for a single variable from a DataFrame.

        Args:
            df (pd.DataFrame): A normalized observation table.
            variable_name (str): The variable name (e.g., 'TMP' or 'WND_TYPE').

        Returns:
            pd.DataFrame: The value, quality code and description columns of the
                          variable, or an empty DataFrame if none are found.
        """
        related_cols = [variable_name, f"{variable_name}_QC", f"{variable_name}_DESCR"]
        existing_cols = [col for col in related_cols if col in df.columns]

        if not existing_cols:
            self.logger.warning(f"No columns found for variable '{variable_name}'.")
            return pd.DataFrame()

        return df[existing_cols].copy()

    # --- Internal Helper Methods ---

    def _resolve_station(
        self, station_icao: str, begin: pd.Timestamp, end: pd.Timestamp
    ) -> StationRecord:
        if self.resolver is None:
            raise StationNotAvailable(f"Station metadata not loaded from {self.station_list_path}.")
        return self.resolver.resolve(station_icao, begin, end)

    def _fetch_day(self, station_id: str, day: pd.Timestamp) -> List[Dict[str, Any]]:
        """Fetches the raw records of a single day."""
        return self.downloader.fetch_records(station_id, day, _inclusive_end(day))

    def _setup_logger(self, log_level: int) -> None:
        """Initializes the package logger and a child logger for the class instance."""
        package_logger = logging.getLogger(__package__)
        if not package_logger.handlers:
            package_logger.setLevel(log_level)
            handler = logging.StreamHandler(sys.stdout)
            formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            handler.setFormatter(formatter)
            package_logger.addHandler(handler)
        self.logger = package_logger.getChild(self.__class__.__name__)

    def _download_station_list_if_missing(self) -> None:
        """Ensures the station list is available locally using the downloader."""
        self.downloader.download_station_list(self.station_list_path)

    def _load_station_resolver(self) -> Optional[StationResolver]:
        """Loads the station history file."""
        if not os.path.exists(self.station_list_path):
            self.logger.error(f"Station metadata file not found at {self.station_list_path}")
            return None

        try:
            return StationResolver.from_csv(self.station_list_path, self.logger)
        except (OSError, ValueError, KeyError) as e:
            self.logger.error(f"Failed to load or process station metadata from {self.station_list_path}: {e}")
            return None


def _inclusive_end(end: pd.Timestamp) -> pd.Timestamp:
    """Extends a midnight end time to the last second of that day."""
    if end == end.normalize():
        return end + pd.Timedelta(days=1) - pd.Timedelta(seconds=1)
    return end


def fetch_observations(
    station_icao: str, begin_date: DateLike, end_date: DateLike, **processor_kwargs
) -> pd.DataFrame:
    """
    Retrieves the normalized hourly observations of a station.

    Args:
        station_icao (str): The 4-letter ICAO code, e.g. 'KSEA'.
        begin_date: Start of the range in UTC.
        end_date: End of the range in UTC, inclusive.
        **processor_kwargs: Passed to ISDProcessor.

    Returns:
        pd.DataFrame: The normalized observation table.
    """
    return ISDProcessor(**processor_kwargs).fetch_observations(station_icao, begin_date, end_date)
