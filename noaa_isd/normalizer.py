"""
Turns raw ISD records into a typed, UTC time-indexed observation table.
"""

import logging
from typing import Any, Dict, List, Union

import pandas as pd

from .decoding import (
    COMPOSITE_SCHEMAS,
    count_out_of_range,
    decode_categorical_column,
    decode_value_column,
    split_composite_column,
    to_quality_code_column,
)
from .exceptions import DuplicateObservation, MalformedResponse
from .support_data import VariableInfo, get_variable_info

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S'
LABEL_COLUMNS = ('STATION', 'NAME', 'QUALITY_CONTROL')
CATEGORICAL_FIELDS = ('REPORT_TYPE', 'SOURCE')
SCALAR_FIELDS = ('TMP', 'DEW', 'SLP')
COMPOSITE_FIELDS = tuple(COMPOSITE_SCHEMAS)


def normalize_observations(
    records: Union[List[Dict[str, Any]], pd.DataFrame]
) -> pd.DataFrame:
    """
    Decodes a batch of raw ISD records into an observation table.

    Scalar fields (TMP, DEW, SLP) are split into a value column and a `_QC`
    column. Composite fields (WND, VIS, CIG) are first split into their
    sub-fields, each decoded on its own, and the raw column is dropped.
    Categorical fields get a companion `_DESCR` column. Units and
    descriptions of every decoded column are stored in `attrs`.

    Args:
        records (list of dict or pd.DataFrame): Raw records as returned by the
            data service, with at least 'DATE' and 'STATION' fields.

    Returns:
        pd.DataFrame: The observation table, indexed by UTC 'DATE' in ascending order.

    Raises:
        MalformedResponse: If records lack a 'DATE' field.
        DuplicateObservation: If a station reports the same timestamp twice.
        MalformedField, MalformedComposite, UnknownQualityCode: On wire-format violations.
    """
    df = records.copy() if isinstance(records, pd.DataFrame) else pd.DataFrame(records)
    if df.empty:
        logger.warning("No records to normalize.")
        return _empty_table()

    if 'DATE' not in df.columns:
        raise MalformedResponse("Records have no 'DATE' field.")

    df['DATE'] = pd.to_datetime(df['DATE'], format=TIMESTAMP_FORMAT, utc=True)
    _check_unique_observations(df)

    units: Dict[str, str] = {}
    descriptions: Dict[str, str] = {}

    for col in LABEL_COLUMNS:
        if col in df.columns:
            df[col] = df[col].astype('category')

    for field in CATEGORICAL_FIELDS:
        if field in df.columns:
            df = _with_categorical(df, df[field], get_variable_info(field), descriptions)

    for field in SCALAR_FIELDS:
        if field in df.columns:
            df = _with_value(df, df[field], get_variable_info(field), units, descriptions)

    for field in COMPOSITE_FIELDS:
        if field not in df.columns:
            continue
        sub_fields = split_composite_column(df[field], field)
        df = df.drop(columns=field)
        for name in sub_fields.columns:
            if name.endswith('_QC'):
                df[name] = to_quality_code_column(sub_fields[name], name)
                descriptions[name] = f"{get_variable_info(name[:-3]).description} quality code"
                continue
            info = get_variable_info(name)
            if info.is_numeric:
                df = _with_value(df, sub_fields[name], info, units, descriptions)
            else:
                df = _with_categorical(df, sub_fields[name], info, descriptions)

    df = df.set_index('DATE').sort_index(kind='stable')
    df.attrs['units'] = units
    df.attrs['descriptions'] = descriptions

    stations = ', '.join(str(s) for s in df['STATION'].unique()) if 'STATION' in df.columns else 'unknown'
    logger.info(f"Normalized {len(df)} observations for station(s) {stations}.")
    return df


def _with_value(
    df: pd.DataFrame,
    raw: pd.Series,
    info: VariableInfo,
    units: Dict[str, str],
    descriptions: Dict[str, str],
) -> pd.DataFrame:
    """Adds the value and quality-code columns of a numeric variable."""
    values, codes = decode_value_column(raw, info)

    out_of_range = count_out_of_range(values, info)
    if out_of_range:
        low, high = info.physical_range
        logger.warning(f"{out_of_range} {info.name} values outside documented range [{low}, {high}] {info.units}.")

    df[info.name] = values
    df[f"{info.name}_QC"] = to_quality_code_column(codes, info.name)
    units[info.name] = info.units
    descriptions[info.name] = info.description
    descriptions[f"{info.name}_QC"] = f"{info.description} quality code"
    return df


def _with_categorical(
    df: pd.DataFrame,
    raw: pd.Series,
    info: VariableInfo,
    descriptions: Dict[str, str],
) -> pd.DataFrame:
    """Adds the code and description columns of a categorical variable."""
    codes, code_descriptions, unrecognized = decode_categorical_column(raw, info)
    if unrecognized:
        logger.warning(f"Unrecognized {info.name} codes kept as UNRECOGNIZED: {unrecognized}")

    df[info.name] = codes
    df[f"{info.name}_DESCR"] = code_descriptions
    descriptions[info.name] = info.description
    descriptions[f"{info.name}_DESCR"] = f"{info.description} description"
    return df


def _check_unique_observations(df: pd.DataFrame) -> None:
    key = [col for col in ('STATION', 'DATE') if col in df.columns]
    duplicated = df.duplicated(subset=key, keep=False)
    if duplicated.any():
        first = df.loc[duplicated].iloc[0]
        station = first['STATION'] if 'STATION' in df.columns else 'unknown'
        raise DuplicateObservation(
            f"{int(duplicated.sum())} records share a station and timestamp, "
            f"first: station {station} at {first['DATE'].isoformat()}"
        )


def _empty_table() -> pd.DataFrame:
    return pd.DataFrame(index=pd.DatetimeIndex([], tz='UTC', name='DATE'))
