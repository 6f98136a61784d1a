"""
Decoders for the ISD value/quality-code wire format.

Scalar variables arrive as "<value>,<quality code>", e.g. "+0150,1" for an
air temperature of 15.0 degC that passed all checks. Composite variables
(WND, VIS, CIG) pack several of those pairs, plus categorical codes, into
one comma-separated string with a fixed positional layout.
"""

from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .exceptions import MalformedComposite, MalformedField, UnknownField, UnknownQualityCode
from .support_data import QUALITY_CODES, UNRECOGNIZED, UNRECOGNIZED_DESCRIPTION, VariableInfo

DELIMITER = ','

# Ordered sub-fields of each composite and the number of raw parts each one takes
COMPOSITE_SCHEMAS: Dict[str, Tuple[Tuple[str, int], ...]] = {
    'WND': (('WND_DIR', 2), ('WND_TYPE', 1), ('WND_SPEED', 2)),
    'VIS': (('VIS_DIST', 2), ('VIS_VAR', 1), ('VIS_VAR_QC', 1)),
    'CIG': (('CIG_HEIGHT', 2), ('CIG_DETER', 1), ('CIG_CAVOK', 1)),
}


def decode_value_qc(raw: str, scale_factor: int, missing: str) -> Tuple[float, str]:
    """
    Splits a "<value>,<quality code>" pair and converts the value to physical units.

    Args:
        raw (str): The raw pair, e.g. "+0150,1".
        scale_factor (int): Divisor applied to the transmitted integer.
        missing (str): The sentinel string standing for a missing value, e.g. "+9999".

    Returns:
        Tuple[float, str]: The physical value (NaN when missing) and the raw quality code.

    Raises:
        MalformedField: If the pair does not have exactly two parts or the value is not an integer.
    """
    parts = raw.split(DELIMITER)
    if len(parts) != 2:
        raise MalformedField(raw, f"expected 2 comma-separated parts, got {len(parts)}")

    value_str, code = parts[0].strip(), parts[1].strip()
    if value_str == missing:
        return np.nan, code

    try:
        raw_int = int(value_str)
    except ValueError:
        raise MalformedField(raw, f"value {value_str!r} is not an integer") from None
    return raw_int / scale_factor, code


def encode_value(value: float, scale_factor: int) -> int:
    """Converts a physical value back to the transmitted integer."""
    if np.isnan(value):
        raise ValueError("Cannot encode a missing value")
    return int(round(value * scale_factor))


def split_composite(raw: str, field: str) -> 'OrderedDict[str, str]':
    """
    Splits a composite field into the raw strings of its sub-fields.

    Value/quality-code pairs are re-joined so each can be passed to
    `decode_value_qc`; categorical parts are passed through unchanged.

    Args:
        raw (str): The raw composite string, e.g. "090,1,N,0050,1".
        field (str): The composite name ('WND', 'VIS' or 'CIG').

    Returns:
        OrderedDict[str, str]: Sub-field name to raw string, in schema order.

    Raises:
        UnknownField: If `field` is not a known composite.
        MalformedComposite: If the part count does not match the schema.
    """
    schema = COMPOSITE_SCHEMAS.get(field)
    if schema is None:
        raise UnknownField(field)

    parts = raw.split(DELIMITER)
    expected = sum(width for _, width in schema)
    if len(parts) != expected:
        raise MalformedComposite(field, raw, expected, len(parts))

    sub_fields = OrderedDict()
    position = 0
    for name, width in schema:
        sub_fields[name] = DELIMITER.join(parts[position:position + width])
        position += width
    return sub_fields


# --- Column-level helpers used by the normalizer ---

def decode_value_column(raw: pd.Series, info: VariableInfo) -> Tuple[pd.Series, pd.Series]:
    """
    Decodes a column of value/quality-code pairs.

    Empty cells (absent from the service response) decode to a missing value
    with a missing quality code.

    Args:
        raw (pd.Series): Raw "<value>,<code>" strings.
        info (VariableInfo): Descriptor of the variable.

    Returns:
        Tuple[pd.Series, pd.Series]: Float values and raw quality codes, on the input index.
    """
    values: List[float] = []
    codes: List[Optional[str]] = []
    for raw_value in raw:
        if pd.isna(raw_value):
            values.append(np.nan)
            codes.append(None)
            continue
        value, code = decode_value_qc(str(raw_value), info.scale_factor, info.missing)
        values.append(value)
        codes.append(code)
    return (
        pd.Series(values, index=raw.index, dtype='float64', name=info.name),
        pd.Series(codes, index=raw.index, dtype='object', name=f"{info.name}_QC"),
    )


def split_composite_column(raw: pd.Series, field: str) -> pd.DataFrame:
    """Splits every composite string of a column into one column per sub-field."""
    schema = COMPOSITE_SCHEMAS.get(field)
    if schema is None:
        raise UnknownField(field)
    names = [name for name, _ in schema]

    rows = []
    for raw_value in raw:
        if pd.isna(raw_value):
            rows.append({name: None for name in names})
        else:
            rows.append(split_composite(str(raw_value), field))
    return pd.DataFrame(rows, index=raw.index, columns=names)


def to_quality_code_column(codes: pd.Series, field: str) -> pd.Series:
    """
    Converts raw quality codes to a categorical over the quality-code table.

    Raises:
        UnknownQualityCode: If any non-missing code is not in the table.
    """
    unknown = sorted(set(codes.dropna()) - set(QUALITY_CODES))
    if unknown:
        raise UnknownQualityCode(unknown[0], field)
    return pd.Series(
        pd.Categorical(codes, categories=list(QUALITY_CODES)),
        index=codes.index,
        name=codes.name,
    )


def decode_categorical_column(
    raw: pd.Series, info: VariableInfo
) -> Tuple[pd.Series, pd.Series, List[str]]:
    """
    Decodes a column of categorical codes against the variable's code table.

    The missing sentinel becomes NaN. Codes absent from the table are kept as
    the UNRECOGNIZED level rather than rejected.

    Args:
        raw (pd.Series): Raw code strings.
        info (VariableInfo): Descriptor of a categorical variable.

    Returns:
        Tuple[pd.Series, pd.Series, List[str]]: The code column, the matching
            description column, and the sorted list of unrecognized raw codes.
    """
    cleaned = raw.astype('object')
    cleaned = cleaned.where(cleaned.isna(), cleaned.astype(str).str.strip())
    cleaned = cleaned.mask(cleaned == info.missing)

    known = [code for code in info.codes if code != info.missing]
    unrecognized = sorted(set(cleaned.dropna()) - set(known))
    if unrecognized:
        cleaned = cleaned.mask(cleaned.isin(unrecognized), UNRECOGNIZED)

    descriptions = {code: info.codes[code] for code in known}
    descriptions[UNRECOGNIZED] = UNRECOGNIZED_DESCRIPTION

    code_column = pd.Series(
        pd.Categorical(cleaned, categories=known + [UNRECOGNIZED]),
        index=raw.index,
        name=info.name,
    )
    descr_column = pd.Series(
        pd.Categorical(cleaned.map(descriptions), categories=list(dict.fromkeys(descriptions.values()))),
        index=raw.index,
        name=f"{info.name}_DESCR",
    )
    return code_column, descr_column, unrecognized


def count_out_of_range(values: pd.Series, info: VariableInfo) -> int:
    """Counts non-missing values outside the variable's documented physical range."""
    low, high = info.physical_range
    present = values.dropna()
    return int((~present.between(low, high)).sum())
