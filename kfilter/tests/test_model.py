import typing
import numpy as np
from numpy.testing import assert_allclose
import pytest
from kfilter import ConfigurationError, Static, SystemMatrices, TimeVarying
from kfilter.model import as_system_array


def _mapping(n_states=2, n_obs=3):
    return dict(C=np.zeros(n_states), T=np.identity(n_states),
                R=np.identity(n_states), D=np.ones(n_obs),
                M=np.ones((n_obs, n_states)), Q=np.identity(n_obs))


def test_static_and_time_varying():
    value = np.arange(4.0).reshape(2, 2)
    static = Static(value)
    assert static.shape == (2, 2)
    assert not static.time_varying
    assert static.at(0) is static.at(5)
    assert_allclose(static.at(3), value)

    values = np.arange(12.0).reshape(3, 2, 2)
    tv = TimeVarying(values)
    assert tv.shape == (2, 2)
    assert len(tv) == 3
    assert tv.time_varying
    for k in range(3):
        assert_allclose(tv.at(k), values[k])


def test_arrays_are_read_only_views():
    value = np.identity(2)
    static = Static(value)
    with pytest.raises(ValueError):
        static.at(0)[0, 0] = 5.0
    assert value.flags.writeable
    assert np.shares_memory(static.value, value)


def test_as_system_array():
    assert isinstance(as_system_array('T', np.identity(2)), Static)
    assert isinstance(as_system_array('C', np.zeros(2)), Static)
    assert isinstance(as_system_array('T', np.ones((1, 2, 2))), Static)
    assert as_system_array('T', np.ones((1, 2, 2))).shape == (2, 2)
    assert isinstance(as_system_array('T', np.ones((5, 2, 2))), TimeVarying)
    assert isinstance(as_system_array('D', np.ones((5, 2))), TimeVarying)

    wrapped = Static(np.identity(2))
    assert as_system_array('T', wrapped) is wrapped

    with pytest.raises(ConfigurationError):
        as_system_array('C', 1.0)
    with pytest.raises(ConfigurationError):
        as_system_array('M', np.ones((2, 2, 2, 2)))
    with pytest.raises(ConfigurationError):
        as_system_array('Q', [["a"]])


def test_from_mapping():
    mapping = _mapping()
    mapping['M'] = np.ones((4, 3, 2))
    bundle = SystemMatrices.from_mapping(mapping, 4)
    assert bundle.n_states == 2
    assert bundle.n_obs == 3
    assert bundle.time_varying == ('M',)

    C, T, R, D, M, Q = bundle.resolve(2)
    assert_allclose(C, np.zeros(2))
    assert_allclose(T, np.identity(2))
    assert M.shape == (3, 2)
    assert Q.shape == (3, 3)


def test_from_mapping_missing_keys():
    mapping = _mapping()
    del mapping['T']
    del mapping['Q']
    with pytest.raises(ConfigurationError, match="T, Q"):
        SystemMatrices.from_mapping(mapping)


def test_epoch_count():
    mapping = _mapping()
    mapping['R'] = np.stack([np.identity(2)] * 3)
    mapping['Q'] = np.stack([np.identity(3)] * 4)
    with pytest.raises(ConfigurationError, match="R, Q"):
        SystemMatrices.from_mapping(mapping, 5)

    bundle = SystemMatrices.from_mapping(mapping)
    with pytest.raises(ConfigurationError):
        bundle.check_n_epochs(3)


def test_explicit_wrappers():
    arrays = {name: Static(value) for name, value in _mapping().items()}
    arrays['T'] = TimeVarying(np.stack([np.identity(2)] * 2))
    bundle = SystemMatrices(n_epochs=2, **arrays)
    assert bundle.time_varying == ('T',)

    arrays['T'] = np.identity(2)
    with pytest.raises(ConfigurationError):
        SystemMatrices(**arrays)


def test_inconsistent_shapes():
    for name, value in [('T', np.identity(3)), ('M', np.ones((2, 2))),
                        ('Q', np.identity(2)), ('R', np.ones((2, 3))),
                        ('C', np.zeros((2, 3, 1)))]:
        mapping = _mapping()
        mapping[name] = value
        with pytest.raises(ConfigurationError):
            SystemMatrices.from_mapping(mapping)


def test_column_vectors():
    mapping = _mapping()
    mapping['C'] = np.ones((2, 1))
    mapping['D'] = np.ones((3, 1))
    bundle = SystemMatrices.from_mapping(mapping, 4)
    assert bundle.n_states == 2
    assert bundle.n_obs == 3
    assert bundle.time_varying == ()
    assert_allclose(bundle.resolve(0)[0], np.ones(2))

    mapping['C'] = np.arange(8.0).reshape(4, 2, 1)
    bundle = SystemMatrices.from_mapping(mapping, 4)
    assert bundle.time_varying == ('C',)
    assert_allclose(bundle.resolve(3)[0], [6.0, 7.0])

    assert as_system_array('C', np.ones((3, 1))).shape == (3,)
    assert isinstance(as_system_array('D', np.ones((5, 2, 1))), TimeVarying)


def test_column_of_wrong_length():
    mapping = _mapping()
    mapping['C'] = np.ones((4, 1))
    with pytest.raises(ConfigurationError, match="C"):
        SystemMatrices.from_mapping(mapping, 4)

    mapping = _mapping(n_states=1)
    mapping['C'] = np.ones((4, 1))
    with pytest.raises(ConfigurationError, match="C"):
        SystemMatrices.from_mapping(mapping, 4)

    mapping['C'] = np.ones((4, 1, 1))
    bundle = SystemMatrices.from_mapping(mapping, 4)
    assert bundle.time_varying == ('C',)


def test_covariances_must_be_symmetric():
    for name, value in [('R', np.array([[1.0, 0.1], [0.0, 1.0]])),
                        ('Q', np.array([[2.0, 1.0, 0.0], [0.0, 2.0, 0.0],
                                        [0.0, 0.0, 1.0]]))]:
        mapping = _mapping()
        mapping[name] = value
        with pytest.raises(ConfigurationError, match=name):
            SystemMatrices.from_mapping(mapping)

    mapping = _mapping()
    Q = np.stack([np.identity(3)] * 4)
    Q[2, 0, 1] = 0.5
    mapping['Q'] = Q
    with pytest.raises(ConfigurationError, match="Q"):
        SystemMatrices.from_mapping(mapping, 4)

    mapping = _mapping()
    mapping['Q'] = np.array([[1.0, 0.3, 0.0], [0.3 + 1e-14, 1.0, 0.0],
                             [0.0, 0.0, 1.0]])
    SystemMatrices.from_mapping(mapping)


def test_annotations():
    hints = typing.get_type_hints(SystemMatrices)
    assert hints['n_epochs'] == typing.Optional[int]
    for name in ['C', 'T', 'R', 'D', 'M', 'Q']:
        assert hints[name] == typing.Union[Static, TimeVarying]
