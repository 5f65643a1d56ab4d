"""
Tests for the Result envelope.

Validates:
    - Construction with arbitrary payloads
    - Defaults (empty warnings, automatic provenance)
    - Immutability
    - has_warning substring search
"""

from dataclasses import FrozenInstanceError, dataclass

import numpy as np
import pytest

import pycompute
from pycompute.core.result import Result, _default_provenance


@dataclass(frozen=True)
class FakeParams:
    value: float


def _result(**kwargs):
    defaults = dict(
        params=FakeParams(1.0),
        info={'method': 'test'},
        timing=None,
        backend_name='cpu_test',
    )
    defaults.update(kwargs)
    return Result(**defaults)


# ═══════════════════════════════════════════════════════════════════════
# Construction and defaults
# ═══════════════════════════════════════════════════════════════════════


class TestResultConstruction:

    def test_basic_creation(self):
        result = _result()
        assert result.params.value == 1.0
        assert result.info == {'method': 'test'}
        assert result.backend_name == 'cpu_test'
        assert result.timing is None

    def test_array_payload(self):
        result = _result(params=np.array([1.0, 2.0]))
        np.testing.assert_array_equal(result.params, [1.0, 2.0])

    def test_timing_with_breakdown(self):
        result = _result(timing={'total_seconds': 0.5, 'irls': 0.4})
        assert result.timing['irls'] == 0.4

    def test_warnings_default_empty(self):
        assert _result().warnings == ()

    def test_provenance_auto_generated(self):
        prov = _result().provenance
        assert prov['pycompute_version'] == pycompute.__version__
        assert prov['numpy_version'] == np.__version__
        assert 'scipy_version' in prov

    def test_provenance_explicit_override(self):
        result = _result(provenance={'custom': 'yes'})
        assert result.provenance == {'custom': 'yes'}


# ═══════════════════════════════════════════════════════════════════════
# Immutability
# ═══════════════════════════════════════════════════════════════════════


class TestImmutability:

    def test_cannot_set_params(self):
        result = _result()
        with pytest.raises(FrozenInstanceError):
            result.params = FakeParams(2.0)

    def test_cannot_set_warnings(self):
        result = _result()
        with pytest.raises(FrozenInstanceError):
            result.warnings = ('late',)


# ═══════════════════════════════════════════════════════════════════════
# has_warning
# ═══════════════════════════════════════════════════════════════════════


class TestHasWarning:

    def test_no_warnings_returns_false(self):
        assert not _result().has_warning('anything')

    def test_substring_match(self):
        result = _result(warnings=('IRLS did not converge in 25 iterations',))
        assert result.has_warning('did not converge')

    def test_no_match(self):
        result = _result(warnings=('something else',))
        assert not result.has_warning('converge')


class TestDefaultProvenance:

    def test_independent_copies(self):
        a = _default_provenance()
        b = _default_provenance()
        a['extra'] = 'x'
        assert 'extra' not in b
