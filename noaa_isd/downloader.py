import json
import logging
import os
import shutil
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Optional

import pandas as pd

from .exceptions import MalformedResponse
from .stations import STATION_LIST_URL

DATA_TYPES = ['WND', 'CIG', 'VIS', 'TMP', 'DEW', 'SLP']


class ISDDownloader:
    """Handles requests to the NCEI Access Data Service and the station list download."""

    def __init__(
        self,
        timeout: int,
        logger: logging.Logger,
        token: Optional[str] = None,
        data_types: Optional[List[str]] = None,
    ):
        """
        Initializes the downloader.

        Args:
            timeout (int): Timeout in seconds for network operations.
            logger (logging.Logger): An existing logger instance for output.
            token (str, optional): NCEI access token sent in the 'token' header.
            data_types (list of str, optional): ISD data types to request. Defaults to DATA_TYPES.
        """
        self.base_url = 'https://www.ncei.noaa.gov/access/services/data/v1'
        self.dataset = 'global-hourly'
        self.timeout = timeout
        self.logger = logger
        self.token = token
        self.data_types = data_types or DATA_TYPES

    def download_station_list(self, path: str) -> bool:
        """
        Downloads the ISD station history if it doesn't already exist at the specified path.

        Args:
            path (str): The target file path for the station history.

        Returns:
            bool: True if the file exists or was downloaded successfully, False otherwise.
        """
        if os.path.exists(path):
            return True

        self.logger.warning(f"Station list not found at '{path}'.")
        self.logger.info(f"Downloading from {STATION_LIST_URL}...")

        try:
            dir_name = os.path.dirname(path)
            if dir_name:
                os.makedirs(dir_name, exist_ok=True)

            with urllib.request.urlopen(STATION_LIST_URL, timeout=self.timeout) as response, open(path, 'wb') as out_file:
                shutil.copyfileobj(response, out_file)
            self.logger.info("Successfully downloaded station list.")
            return True
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            self.logger.error(f"Failed to download station list: {e}")
            return False

    def build_query_url(self, station_id: str, begin: pd.Timestamp, end: pd.Timestamp) -> str:
        """Builds the data query URL for one station and an inclusive UTC range."""
        params = {
            'dataset': self.dataset,
            'stations': station_id,
            'dataTypes': ','.join(self.data_types),
            'startDate': begin.strftime('%Y-%m-%dT%H:%M:%S'),
            'endDate': end.strftime('%Y-%m-%dT%H:%M:%S'),
            'format': 'json',
            'units': 'metric',
            'includeStationName': 'true',
            'includeAttributes': 'true',
        }
        return f"{self.base_url}?{urllib.parse.urlencode(params, safe=',:')}"

    def fetch_records(
        self, station_id: str, begin: pd.Timestamp, end: pd.Timestamp
    ) -> List[Dict[str, Any]]:
        """
        Retrieves the raw records of a station for a date range.

        Network errors are logged and re-raised unchanged; there is no retry.

        Args:
            station_id (str): The USAF/WBAN identifier of the station.
            begin (pd.Timestamp): Start of the range (UTC).
            end (pd.Timestamp): End of the range (UTC).

        Returns:
            List[Dict[str, Any]]: The raw records, one dict per observation.

        Raises:
            MalformedResponse: If the body is not JSON or not a JSON array.
        """
        url = self.build_query_url(station_id, begin, end)
        headers = {'token': self.token} if self.token else {}
        request = urllib.request.Request(url, headers=headers)
        self.logger.info(f"Requesting data from: {url}")

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                body = json.load(response)
        except json.JSONDecodeError as e:
            self.logger.error(f"Data request for station {station_id} returned a body that is not JSON.")
            raise MalformedResponse(f"Data request for station {station_id} did not return JSON: {e}") from e
        except urllib.error.HTTPError as e:
            self.logger.error(f"Data request for station {station_id} failed with HTTP {e.code}: {e.reason}")
            raise
        except TimeoutError:
            self.logger.error(f"Data request for station {station_id} timed out after {self.timeout} seconds.")
            raise
        except urllib.error.URLError as e:
            self.logger.error(f"Data request for station {station_id} failed: {e.reason}")
            raise

        if not isinstance(body, list):
            raise MalformedResponse(f"Expected a JSON array of records, got {type(body).__name__}.")

        self.logger.info(f"Received {len(body)} records for station {station_id}.")
        return body
