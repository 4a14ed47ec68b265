import numpy as np
from .errors import ConfigurationError, InvalidInputError
from .measurement import observed_mask
from .util import is_symmetric


def check_observations(observations, n_epochs=None, missing_value=np.nan):
    try:
        missing_value = float(missing_value)
    except (TypeError, ValueError) as error:
        raise InvalidInputError("missing_value must be a real number") from error

    try:
        Y = np.asarray(observations, dtype=float)
    except (TypeError, ValueError) as error:
        raise InvalidInputError("Observations must be convertible to a real array") \
            from error

    if Y.ndim != 2:
        raise InvalidInputError(
            "Observations must have shape (n_obs, n_epochs), got {}".format(Y.shape))
    if n_epochs is not None and Y.shape[1] != n_epochs:
        raise InvalidInputError(
            "Observations have {} columns, but n_epochs is {}".format(Y.shape[1],
                                                                     n_epochs))

    mask = observed_mask(Y, missing_value)
    if not np.all(np.isfinite(Y[mask])):
        raise InvalidInputError("Observations must be finite or marked as missing")

    return Y, mask


def check_initial_state(s0, P0, n_states):
    s0 = np.asarray(s0, dtype=float)
    P0 = np.asarray(P0, dtype=float)

    if s0.shape == (n_states, 1):
        s0 = s0[:, 0]

    if s0.shape != (n_states,):
        raise ConfigurationError("s0 must be a vector with {} elements, got shape {}"
                                 .format(n_states, s0.shape))
    if P0.shape != (n_states, n_states):
        raise ConfigurationError("P0 must have shape {}, got {}"
                                 .format((n_states, n_states), P0.shape))
    if not np.all(np.isfinite(s0)) or not np.all(np.isfinite(P0)):
        raise ConfigurationError("s0 and P0 must contain only finite values")
    if not is_symmetric(P0):
        raise ConfigurationError("P0 must be symmetric")

    return s0, P0
