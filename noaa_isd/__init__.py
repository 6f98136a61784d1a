"""Hourly Integrated Surface Data (ISD) retrieval and decoding."""

from .cleaning import clean, summarize_failed_quality_codes
from .decoding import decode_value_qc, split_composite
from .exceptions import (
    DuplicateObservation,
    InvalidDateRange,
    ISDError,
    MalformedComposite,
    MalformedField,
    MalformedResponse,
    StationNotAvailable,
    UnknownField,
    UnknownQualityCode,
)
from .normalizer import normalize_observations
from .processor import ISDProcessor, fetch_observations
from .stations import StationRecord, StationResolver

__all__ = [
    'ISDProcessor',
    'StationRecord',
    'StationResolver',
    'clean',
    'decode_value_qc',
    'fetch_observations',
    'normalize_observations',
    'split_composite',
    'summarize_failed_quality_codes',
    'DuplicateObservation',
    'InvalidDateRange',
    'ISDError',
    'MalformedComposite',
    'MalformedField',
    'MalformedResponse',
    'StationNotAvailable',
    'UnknownField',
    'UnknownQualityCode',
]
