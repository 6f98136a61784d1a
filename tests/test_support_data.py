import pytest

from noaa_isd.exceptions import UnknownField, UnknownQualityCode
from noaa_isd.support_data import (
    QUALITY_CODES,
    VARIABLES,
    get_variable_info,
    quality_code_description,
)


class TestQualityCodes:
    def test_code_set(self):
        assert list(QUALITY_CODES) == [
            '0', '1', '2', '3', '4', '5', '6', '7', '9',
            'A', 'C', 'I', 'M', 'P', 'R', 'U',
        ]

    def test_lookup(self):
        assert quality_code_description('3') == 'Erroneous'

    def test_unknown_code(self):
        with pytest.raises(UnknownQualityCode):
            quality_code_description('8')

    def test_read_only(self):
        with pytest.raises(TypeError):
            QUALITY_CODES['X'] = 'made up'


class TestVariables:
    def test_all_fields_present(self):
        assert set(VARIABLES) == {
            'SOURCE', 'REPORT_TYPE', 'WND_DIR', 'WND_TYPE', 'WND_SPEED',
            'CIG_HEIGHT', 'CIG_DETER', 'CIG_CAVOK', 'VIS_DIST', 'VIS_VAR',
            'TMP', 'DEW', 'SLP',
        }

    def test_numeric_descriptor(self):
        info = get_variable_info('TMP')
        assert info.is_numeric
        assert not info.is_categorical
        assert info.scale_factor == 10
        assert info.missing == '+9999'
        assert info.physical_range == (-93.2, 61.8)

    def test_limits(self):
        assert get_variable_info('VIS_DIST').max_value == 160000
        assert get_variable_info('CIG_HEIGHT').max_value == 22000

    def test_categorical_descriptor(self):
        info = get_variable_info('WND_TYPE')
        assert info.scale_factor is None
        assert info.codes['N'] == 'Normal'

    def test_unknown_field(self):
        with pytest.raises(UnknownField):
            get_variable_info('PRECIP')

    def test_descriptor_is_frozen(self):
        info = get_variable_info('SLP')
        with pytest.raises(AttributeError):
            info.scale_factor = 1
