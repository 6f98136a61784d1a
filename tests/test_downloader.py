import io
import logging
import urllib.error
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from noaa_isd.downloader import ISDDownloader
from noaa_isd.exceptions import MalformedResponse


def make_downloader(**kwargs):
    return ISDDownloader(timeout=5, logger=logging.getLogger("test"), **kwargs)


class TestStationListDownload:
    def test_existing_file_is_not_downloaded(self, station_csv):
        with patch("noaa_isd.downloader.urllib.request.urlopen") as mock_urlopen:
            assert make_downloader().download_station_list(station_csv)
        mock_urlopen.assert_not_called()

    def test_download(self, tmp_path):
        target = tmp_path / "meta" / "isd-history.csv"
        mock_urlopen = MagicMock()
        mock_urlopen.return_value.__enter__.return_value = io.BytesIO(b'"USAF","WBAN"\n')
        with patch("noaa_isd.downloader.urllib.request.urlopen", mock_urlopen):
            assert make_downloader().download_station_list(str(target))
        assert target.read_bytes() == b'"USAF","WBAN"\n'

    def test_download_failure(self, tmp_path):
        mock_urlopen = MagicMock(side_effect=urllib.error.URLError("offline"))
        with patch("noaa_isd.downloader.urllib.request.urlopen", mock_urlopen):
            assert not make_downloader().download_station_list(str(tmp_path / "isd-history.csv"))


class TestQueryUrl:
    def test_custom_data_types(self):
        url = make_downloader(data_types=["TMP", "DEW"]).build_query_url(
            "72793024233",
            pd.Timestamp("2016-03-01", tz="UTC"),
            pd.Timestamp("2016-03-07T23:59:59", tz="UTC"),
        )
        assert url.startswith("https://www.ncei.noaa.gov/access/services/data/v1?")
        assert "dataTypes=TMP,DEW" in url
        assert "includeStationName=true" in url
        assert "includeAttributes=true" in url
        assert "endDate=2016-03-07T23:59:59" in url

    def test_no_token_header(self):
        mock_urlopen = MagicMock()
        mock_urlopen.return_value.__enter__.return_value.read.return_value = b"[]"
        with patch("noaa_isd.downloader.urllib.request.urlopen", mock_urlopen):
            records = make_downloader().fetch_records(
                "72793024233", pd.Timestamp("2016-03-01", tz="UTC"), pd.Timestamp("2016-03-01", tz="UTC")
            )
        assert records == []
        assert mock_urlopen.call_args[0][0].get_header("Token") is None


class TestFetchRecords:
    def test_non_json_body(self):
        mock_urlopen = MagicMock()
        mock_urlopen.return_value.__enter__.return_value.read.return_value = b"<html>Service Unavailable</html>"
        with patch("noaa_isd.downloader.urllib.request.urlopen", mock_urlopen):
            with pytest.raises(MalformedResponse):
                make_downloader().fetch_records(
                    "72793024233", pd.Timestamp("2016-03-01", tz="UTC"), pd.Timestamp("2016-03-01", tz="UTC")
                )
