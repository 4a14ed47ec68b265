"""System matrices of a linear state-space model.

The model is defined as::

    s_k = C_k + T_k s_{k - 1} + e_k,    e_k ~ N(0, R_k)
    y_k = D_k + M_k s_k + eta_k,        eta_k ~ N(0, Q_k)

Each of the six arrays is either static (used for all epochs) or time-varying
(specified for each epoch). The choice is made once when the bundle is built, after
that the matrices for epoch ``k`` are picked by `SystemMatrices.resolve`.
"""
from dataclasses import dataclass
from typing import Optional, Union
import numpy as np
from .errors import ConfigurationError
from .util import is_symmetric


MATRIX_NAMES = ('C', 'T', 'R', 'D', 'M', 'Q')
VECTOR_NAMES = ('C', 'D')
COVARIANCE_NAMES = ('R', 'Q')


def _as_readonly(array):
    # A view is made read-only, the flags of the caller's array are untouched.
    array = np.asarray(array, dtype=float).view()
    array.flags.writeable = False
    return array


class Static:
    """Array which is the same for all epochs.

    Parameters
    ----------
    value : array_like
        The array, a vector or a matrix.
    """
    time_varying = False

    def __init__(self, value):
        self.value = _as_readonly(value)

    @property
    def shape(self):
        return self.value.shape

    def at(self, k):
        return self.value

    def __repr__(self):
        return "Static(shape={})".format(self.shape)


class TimeVarying:
    """Array specified for each epoch.

    Parameters
    ----------
    values : array_like, shape (n_epochs, ...)
        Arrays for each epoch stacked along the first axis.
    """
    time_varying = True

    def __init__(self, values):
        self.values = _as_readonly(values)
        if self.values.ndim == 0:
            raise ConfigurationError("Time-varying array must have an epoch axis")

    @property
    def shape(self):
        return self.values.shape[1:]

    def __len__(self):
        return len(self.values)

    def at(self, k):
        return self.values[k]

    def __repr__(self):
        return "TimeVarying(n_epochs={}, shape={})".format(len(self), self.shape)


def as_system_array(name, value, size=None):
    """Wrap an array into `Static` or `TimeVarying`.

    An array with one extra leading axis compared to its base form (vector for C and D,
    matrix for the rest) is time-varying if that axis has more than 1 element.
    Vectors may also be given as columns: shape (n, 1) is a static vector and shape
    (n_epochs, n, 1) is a stack of them. Already wrapped arrays are returned as is.

    Parameters
    ----------
    name : str
        Array name, one of 'C', 'T', 'R', 'D', 'M', 'Q'.
    value : array_like, Static or TimeVarying
        Array to wrap.
    size : int or None, optional
        Expected vector length, used to reject columns of a wrong length for C and D.
        If None (default), not checked here.
    """
    if isinstance(value, (Static, TimeVarying)):
        return value

    try:
        value = np.asarray(value, dtype=float)
    except (TypeError, ValueError) as error:
        raise ConfigurationError("{} must be a real array".format(name)) from error

    if name in VECTOR_NAMES:
        if value.ndim == 2 and value.shape[1] == 1:
            if size is not None and len(value) != size:
                raise ConfigurationError(
                    "{} given as a column must have {} elements, got shape {}; stack "
                    "time-varying vectors with shape (n_epochs, n) or "
                    "(n_epochs, n, 1)".format(name, size, value.shape))
            return Static(value[:, 0])
        if value.ndim == 3 and value.shape[2] == 1:
            value = value[:, :, 0]
        base_ndim = 1
    else:
        base_ndim = 2

    if value.ndim == base_ndim:
        return Static(value)
    if value.ndim == base_ndim + 1:
        if len(value) == 1:
            return Static(value[0])
        return TimeVarying(value)

    kind = "vector" if base_ndim == 1 else "matrix"
    raise ConfigurationError(
        "{} must be a {} or a stack of them along the first axis, got array with "
        "shape {}".format(name, kind, value.shape))


@dataclass(frozen=True)
class SystemMatrices:
    """Bundle of the state-space model arrays.

    Shapes are checked on construction, `ConfigurationError` is raised for
    inconsistent arrays.

    Parameters
    ----------
    C : Static or TimeVarying, shape (n_states,)
        Transition equation intercept.
    T : Static or TimeVarying, shape (n_states, n_states)
        Transition matrix.
    R : Static or TimeVarying, shape (n_states, n_states)
        Covariance of the transition shocks.
    D : Static or TimeVarying, shape (n_obs,)
        Measurement equation intercept.
    M : Static or TimeVarying, shape (n_obs, n_states)
        Measurement matrix.
    Q : Static or TimeVarying, shape (n_obs, n_obs)
        Covariance of the measurement shocks.
    n_epochs : int or None, optional
        Number of epochs. When given, time-varying arrays must have exactly this
        number of elements.
    """
    C: Union[Static, TimeVarying]
    T: Union[Static, TimeVarying]
    R: Union[Static, TimeVarying]
    D: Union[Static, TimeVarying]
    M: Union[Static, TimeVarying]
    Q: Union[Static, TimeVarying]
    n_epochs: Optional[int] = None

    def __post_init__(self):
        for name in MATRIX_NAMES:
            if not isinstance(getattr(self, name), (Static, TimeVarying)):
                raise ConfigurationError(
                    "{} must be wrapped into Static or TimeVarying".format(name))

        if len(self.C.shape) != 1:
            raise ConfigurationError("C must be a vector")
        if len(self.D.shape) != 1:
            raise ConfigurationError("D must be a vector")

        n_states = self.n_states
        n_obs = self.n_obs
        expected = {'T': (n_states, n_states), 'R': (n_states, n_states),
                    'M': (n_obs, n_states), 'Q': (n_obs, n_obs)}
        for name, shape in expected.items():
            actual = getattr(self, name).shape
            if actual != shape:
                raise ConfigurationError(
                    "{} must have shape {} to be consistent with C and D, got {}"
                    .format(name, shape, actual))

        for name in MATRIX_NAMES:
            array = getattr(self, name)
            values = array.values if array.time_varying else array.value
            if not np.all(np.isfinite(values)):
                raise ConfigurationError("{} must contain only finite values".format(name))

        for name in COVARIANCE_NAMES:
            array = getattr(self, name)
            if not is_symmetric(array.values if array.time_varying else array.value):
                raise ConfigurationError("{} must be symmetric".format(name))

        if self.n_epochs is not None:
            self.check_n_epochs(self.n_epochs)

    @classmethod
    def from_mapping(cls, mapping, n_epochs=None):
        """Build the bundle from a mapping of raw arrays.

        Parameters
        ----------
        mapping : mapping
            Must contain keys 'C', 'T', 'R', 'D', 'M', 'Q'. Values are array_like,
            optionally stacked along the first axis for each epoch, or already
            wrapped into `Static` or `TimeVarying`. C and D may be given as columns
            of shape (n, 1) or stacks of them with shape (n_epochs, n, 1).
        n_epochs : int or None, optional
            Number of epochs to check time-varying arrays against.

        Returns
        -------
        SystemMatrices
        """
        missing = [name for name in MATRIX_NAMES if name not in mapping]
        if missing:
            raise ConfigurationError("Missing matrices: {}".format(", ".join(missing)))
        arrays = {name: as_system_array(name, mapping[name])
                  for name in MATRIX_NAMES if name not in VECTOR_NAMES}
        # Columns given for C and D are checked against sizes implied by T and M.
        arrays['C'] = as_system_array('C', mapping['C'], arrays['T'].shape[0])
        arrays['D'] = as_system_array('D', mapping['D'], arrays['M'].shape[0])
        return cls(n_epochs=n_epochs, **arrays)

    @property
    def n_states(self):
        return self.C.shape[0]

    @property
    def n_obs(self):
        return self.D.shape[0]

    @property
    def time_varying(self):
        """Names of time-varying arrays."""
        return tuple(name for name in MATRIX_NAMES if getattr(self, name).time_varying)

    def check_n_epochs(self, n_epochs):
        """Check that all time-varying arrays are given for `n_epochs` epochs."""
        wrong = [name for name in self.time_varying
                 if len(getattr(self, name)) != n_epochs]
        if wrong:
            raise ConfigurationError(
                "Time-varying arrays {} must have exactly {} elements along the "
                "first axis".format(", ".join(wrong), n_epochs))

    def resolve(self, k):
        """Get arrays for epoch `k`.

        Returns
        -------
        C, T, R, D, M, Q : ndarray
            Read-only arrays valid for epoch `k`.
        """
        return (self.C.at(k), self.T.at(k), self.R.at(k),
                self.D.at(k), self.M.at(k), self.Q.at(k))
