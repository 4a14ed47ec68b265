"""Handling of missing observations in the measurement equation."""
import numpy as np


def observed_mask(y, missing_value=np.nan):
    """Find which observations are present.

    Parameters
    ----------
    y : array_like
        Observations.
    missing_value : float, optional
        Value marking missing observations. NaN values are always considered
        missing. Default is NaN.

    Returns
    -------
    ndarray of bool, same shape as `y`
        True where the observation is present.
    """
    y = np.asarray(y, dtype=float)
    mask = ~np.isnan(y)
    if not np.isnan(missing_value):
        mask &= y != missing_value
    return mask


def adapt_measurement(y, D, M, Q, mask=None):
    """Remove missing observations from the measurement equation.

    The reduced arrays are gathered by index, the input arrays are not modified.

    Parameters
    ----------
    y : ndarray, shape (n_obs,)
        Observation vector.
    D : ndarray, shape (n_obs,)
        Measurement intercept.
    M : ndarray, shape (n_obs, n_states)
        Measurement matrix.
    Q : ndarray, shape (n_obs, n_obs)
        Measurement noise covariance.
    mask : ndarray of bool, shape (n_obs,) or None, optional
        Which observations are present. If None (default), computed by
        `observed_mask` with NaN marking missing values.

    Returns
    -------
    y, D, M, Q : ndarray
        Arrays with rows (and columns for Q) of missing observations removed.
        When nothing is missing, the input arrays are returned.
    n_present : int
        Number of present observations.
    """
    if mask is None:
        mask = observed_mask(y)
    if np.all(mask):
        return y, D, M, Q, len(y)
    index = np.flatnonzero(mask)
    return y[index], D[index], M[index], Q[np.ix_(index, index)], len(index)
