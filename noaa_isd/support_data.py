"""
Static support data for interpreting Integrated Surface Data (ISD) records.

The ISD archive transmits every observation as ASCII integers. Each variable
carries a scale factor to recover physical units, a documented minimum and
maximum, and an all-nines sentinel standing for "not reported". Categorical
variables carry a code table. All of it comes from the federal climate
complex data documentation for ISD (https://www.ncei.noaa.gov/products/land-based-station/integrated-surface-database).

Every table here is a read-only mapping built once at import time.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .exceptions import UnknownField, UnknownQualityCode

UNRECOGNIZED = 'UNRECOGNIZED'
UNRECOGNIZED_DESCRIPTION = 'Unrecognized code'

QUALITY_CODES: Mapping[str, str] = MappingProxyType({
    '0': 'Passed gross limits check',
    '1': 'Passed all quality control checks',
    '2': 'Suspect',
    '3': 'Erroneous',
    '4': 'Passed gross limits check, data originate from an NCEI data source',
    '5': 'Passed all quality control checks, data originate from an NCEI data source',
    '6': 'Suspect, data originate from an NCEI data source',
    '7': 'Erroneous, data originate from an NCEI data source',
    '9': 'Passed gross limits check if element is present',
    'A': 'Data value flagged as suspect, but accepted as a good value',
    'C': ('Temperature and dew point received from Automated Weather Observing System (AWOS) '
          'are reported in whole degrees Celsius. Automated QC flags these values, '
          'but they are accepted as valid.'),
    'I': 'Data value not originally in data, but inserted by validator',
    'M': 'Manual changes made to value based on information provided by NWS or FAA',
    'P': 'Data value not originally flagged as suspect, but replaced by validator',
    'R': 'Data value replaced with value computed by NCEI software',
    'U': 'Data value replaced with edited value',
})

# Codes that mark a value as erroneous
FAILING_QUALITY_CODES = frozenset({'3', '7'})

SOURCE_CODES: Mapping[str, str] = MappingProxyType({
    '1': ('USAF SURFACE HOURLY observation, candidate for merge with NCEI SURFACE HOURLY '
          '(not yet merged, failed element cross-checks)'),
    '2': ('NCEI SURFACE HOURLY observation, candidate for merge with USAF SURFACE HOURLY '
          '(not yet merged, failed element cross-checks)'),
    '3': 'USAF SURFACE HOURLY/NCEI SURFACE HOURLY merged observation',
    '4': 'USAF SURFACE HOURLY observation',
    '5': 'NCEI SURFACE HOURLY observation',
    '6': 'ASOS/AWOS observation from NCEI',
    '7': 'ASOS/AWOS observation merged with USAF SURFACE HOURLY observation',
    '8': 'MAPSO observation (NCEI)',
    'A': ('USAF SURFACE HOURLY/NCEI HOURLY PRECIPITATION merged observation, candidate for '
          'merge with NCEI SURFACE HOURLY (not yet merged, failed element cross-checks)'),
    'B': ('NCEI SURFACE HOURLY/NCEI HOURLY PRECIPITATION merged observation, candidate for '
          'merge with USAF SURFACE HOURLY (not yet merged, failed element cross-checks)'),
    'C': 'USAF SURFACE HOURLY/NCEI SURFACE HOURLY/NCEI HOURLY PRECIPITATION merged observation',
    'D': 'USAF SURFACE HOURLY/NCEI HOURLY PRECIPITATION merged observation',
    'E': 'NCEI SURFACE HOURLY/NCEI HOURLY PRECIPITATION merged observation',
    'F': 'Form OMR/1001 - Weather Bureau city office (keyed data)',
    'G': 'SAO surface airways observation, pre-1949 (keyed data)',
    'H': 'SAO surface airways observation, 1965-1981 format/period (keyed data)',
    'I': 'Climate Reference Network observation',
    'J': 'Cooperative Network observation',
    'K': 'Radiation Network observation',
    'L': 'Data from Climate Data Modernization Program (CDMP) data source',
    'M': 'Data from National Renewable Energy Laboratory (NREL) data source',
    'N': 'NCAR / NCEI cooperative effort (various national datasets)',
    'O': ('Summary observation created by NCEI using hourly observations that may not share '
          'the same data source flag'),
    '9': 'Missing',
})

REPORT_TYPE_CODES: Mapping[str, str] = MappingProxyType({
    'AERO': 'Aerological report',
    'AUST': 'Dataset from Australia',
    'AUTO': 'Report from an automatic station',
    'BOGUS': 'Bogus report',
    'BRAZ': 'Dataset from Brazil',
    'COOPD': 'US Cooperative Network summary of day report',
    'COOPS': 'US Cooperative Network soil temperature report',
    'CRB': 'Climate Reference Book data from CDMP',
    'CRN05': 'Climate Reference Network report, with 5-minute reporting interval',
    'CRN15': 'Climate Reference Network report, with 15-minute reporting interval',
    'FM-12': 'SYNOP Report of surface observation form a fixed land station',
    'FM-13': 'SHIP Report of surface observation from a sea station',
    'FM-14': 'SYNOP MOBIL Report of surface observation from a mobile land station',
    'FM-15': 'METAR Aviation routine weather report',
    'FM-16': 'SPECI Aviation selected special weather report',
    'FM-18': 'BUOY Report of a buoy observation',
    'GREEN': 'Dataset from Greenland',
    'MESOH': 'Hydrological observations from MESONET operated civilian or government agency',
    'MESOS': 'MESONET operated civilian or government agency',
    'MESOW': 'Snow observations from MESONET operated civilian or government agency',
    'MEXIC': 'Dataset from Mexico',
    'NSRDB': 'National Solar Radiation Data Base',
    'PCP15': 'US 15-minute precipitation network report',
    'PCP60': 'US 60-minute precipitation network report',
    'S-S-A': 'Synoptic, airways, and auto merged report',
    'SA-AU': 'Airways and auto merged report',
    'SAO': 'Airways report (includes record specials)',
    'SAOSP': 'Airways special report (excluding record specials)',
    'SHEF': 'Standard Hydrologic Exchange Format',
    'SMARS': 'Supplementary airways station report',
    'SOD': 'Summary of day report from U.S. ASOS or AWOS station',
    'SOM': 'Summary of month report from U.S. ASOS or AWOS station',
    'SURF': 'Surface Radiation Network report',
    'SY-AE': 'Synoptic and aero merged report',
    'SY-AU': 'Synoptic and auto merged report',
    'SY-MT': 'Synoptic and METAR merged report',
    'SY-SA': 'Synoptic and airways merged report',
    'WBO': 'Weather Bureau Office',
    'WNO': 'Washington Naval Observatory',
    '99999': 'Missing',
})

# Report types that are not hourly observations
NON_HOURLY_REPORT_TYPES = frozenset({'BOGUS', 'SOD', 'SOM'})

WIND_TYPE_CODES: Mapping[str, str] = MappingProxyType({
    'A': 'Abridged Beaufort',
    'B': 'Beaufort',
    'C': 'Calm',
    'H': '5-Minute Average Speed',
    'N': 'Normal',
    'R': '60-Minute Average Speed',
    'Q': 'Squall',
    'T': '180-Minute Average Speed',
    'V': 'Variable',
    '9': 'Missing',
})

VISIBILITY_VARIABILITY_CODES: Mapping[str, str] = MappingProxyType({
    'N': 'Not variable',
    'V': 'Variable',
    '9': 'Missing',
})

CEILING_DETERMINATION_CODES: Mapping[str, str] = MappingProxyType({
    'A': 'Aircraft',
    'B': 'Balloon',
    'C': 'Statistically derived',
    'D': 'Persistent cirriform ceiling (pre-1950 data)',
    'E': 'Estimated',
    'M': 'Measured',
    'P': 'Precipitation ceiling (pre-1950 data)',
    'R': 'Radar',
    'S': 'ASOS augmented',
    'U': 'Unknown ceiling (pre-1950 data)',
    'V': 'Variable ceiling (pre-1950 data)',
    'W': 'Obscured',
    '9': 'Missing',
})

CAVOK_CODES: Mapping[str, str] = MappingProxyType({
    'N': 'No',
    'Y': 'Yes',
    '9': 'Missing',
})


@dataclass(frozen=True)
class VariableInfo:
    """
    Decoding descriptor for a single ISD variable.

    Attributes:
        name (str): The column name of the variable.
        description (str): Human-readable description.
        scale_factor (int, optional): Divisor converting the transmitted integer
            to physical units. None for categorical variables.
        min_value (int, optional): Smallest valid raw (unscaled) value.
        max_value (int, optional): Largest valid raw (unscaled) value.
        missing (str): The sentinel string standing for "not reported".
        units (str): Physical units of the scaled value.
        codes (Mapping[str, str], optional): Code table for categorical variables.
    """

    name: str
    description: str
    scale_factor: Optional[int]
    min_value: Optional[int]
    max_value: Optional[int]
    missing: str
    units: str = ''
    codes: Optional[Mapping[str, str]] = None

    @property
    def is_numeric(self) -> bool:
        return self.scale_factor is not None

    @property
    def is_categorical(self) -> bool:
        return self.codes is not None

    @property
    def physical_range(self) -> Tuple[float, float]:
        """The documented [min, max] limits converted to physical units."""
        return self.min_value / self.scale_factor, self.max_value / self.scale_factor


_VARIABLE_LIST = [
    VariableInfo('SOURCE', 'Original data source for observation',
                 None, None, None, '9', codes=SOURCE_CODES),
    VariableInfo('REPORT_TYPE', 'Type of geophysical surface observation',
                 None, None, None, '99999', codes=REPORT_TYPE_CODES),
    VariableInfo('WND_DIR', 'Wind direction', 1, 1, 360, '999', 'degs'),
    VariableInfo('WND_TYPE', 'Wind type code',
                 None, None, None, '9', codes=WIND_TYPE_CODES),
    VariableInfo('WND_SPEED', 'Wind speed', 10, 0, 900, '9999', 'm/s'),
    VariableInfo('CIG_HEIGHT', 'Ceiling height', 1, 0, 22000, '99999', 'm'),
    VariableInfo('CIG_DETER', 'Ceiling determination code',
                 None, None, None, '9', codes=CEILING_DETERMINATION_CODES),
    VariableInfo('CIG_CAVOK', 'Ceiling and visibility okay code',
                 None, None, None, '9', codes=CAVOK_CODES),
    VariableInfo('VIS_DIST', 'Visibility distance', 1, 0, 160000, '999999', 'm'),
    VariableInfo('VIS_VAR', 'Visibility variability code',
                 None, None, None, '9', codes=VISIBILITY_VARIABILITY_CODES),
    VariableInfo('TMP', 'Air temperature', 10, -932, 618, '+9999', 'degs C'),
    VariableInfo('DEW', 'Dew point temperature', 10, -982, 368, '+9999', 'degs C'),
    VariableInfo('SLP', 'Sea level pressure', 10, 8600, 10900, '99999', 'hPa'),
]

VARIABLES: Mapping[str, VariableInfo] = MappingProxyType({v.name: v for v in _VARIABLE_LIST})


def get_variable_info(name: str) -> VariableInfo:
    """
    Looks up the decoding descriptor for a variable.

    Args:
        name (str): The variable name, e.g. 'TMP' or 'WND_SPEED'.

    Returns:
        VariableInfo: The descriptor for the variable.

    Raises:
        UnknownField: If the variable is not in the metadata table.
    """
    try:
        return VARIABLES[name]
    except KeyError:
        raise UnknownField(name) from None


def quality_code_description(code: str) -> str:
    """Returns the meaning of a quality code, raising UnknownQualityCode if undocumented."""
    try:
        return QUALITY_CODES[code]
    except KeyError:
        raise UnknownQualityCode(code) from None
