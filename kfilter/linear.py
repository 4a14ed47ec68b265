"""Linear Kalman filter with missing observations and time-varying matrices."""
import logging
import numpy as np
from scipy import linalg
from ._common import check_initial_state, check_observations
from .errors import ConfigurationError, NumericalError
from .measurement import adapt_measurement, observed_mask
from .model import SystemMatrices
from .util import Bunch, symmetrize


logger = logging.getLogger(__name__)

LOG_2PI = np.log(2 * np.pi)


def _at_epoch(epoch):
    return "" if epoch is None else " at epoch {}".format(epoch)


def kf_predict(s, P, C, T, R):
    """Propagate the state estimate to the next epoch.

    Returns
    -------
    s_pred : ndarray, shape (n_states,)
        Predicted state, ``C + T @ s``.
    P_pred : ndarray, shape (n_states, n_states)
        Predicted covariance, ``T @ P @ T.T + R``.
    """
    return C + T @ s, symmetrize(T @ P @ T.T + R)


def kf_update(s, P, y, D, M, Q, epoch=None):
    """Incorporate a measurement and evaluate its log-likelihood.

    The observation covariance ``S = M @ P @ M.T + Q`` is factorized by Cholesky
    decomposition, which is also used to compute its log-determinant.

    Parameters
    ----------
    s : ndarray, shape (n_states,)
        Predicted state.
    P : ndarray, shape (n_states, n_states)
        Predicted covariance.
    y : ndarray, shape (n,)
        Observation vector without missing values, can be empty.
    D : ndarray, shape (n,)
        Measurement intercept.
    M : ndarray, shape (n, n_states)
        Measurement matrix.
    Q : ndarray, shape (n, n)
        Measurement noise covariance.
    epoch : int or None, optional
        Epoch index, only used in error messages.

    Returns
    -------
    s : ndarray, shape (n_states,)
        Filtered state.
    P : ndarray, shape (n_states, n_states)
        Filtered covariance.
    e : ndarray, shape (n,)
        Prediction error ``y - D - M @ s``.
    log_likelihood : float
        Log-likelihood of `y`, zero when `y` is empty.
    """
    n = len(y)
    if n == 0:
        return s, P, y, 0.0

    S = M @ P @ M.T + Q
    if not np.all(np.isfinite(S)):
        raise NumericalError("Observation covariance is not finite" + _at_epoch(epoch),
                             epoch)
    try:
        L = linalg.cho_factor(S, check_finite=False)
    except linalg.LinAlgError as error:
        raise NumericalError("Observation covariance is not positive definite" +
                             _at_epoch(epoch), epoch) from error

    e = y - (D + M @ s)
    MP = M @ P
    J = linalg.cho_solve(L, MP, check_finite=False).T
    log_det = 2 * np.sum(np.log(np.diag(L[0])))
    log_likelihood = -0.5 * (n * LOG_2PI + log_det +
                             e @ linalg.cho_solve(L, e, check_finite=False))
    if not np.isfinite(log_likelihood):
        raise NumericalError("Log-likelihood is not finite" + _at_epoch(epoch), epoch)

    return s + J @ e, symmetrize(P - J @ MP), e, log_likelihood


def filter_step(s, P, y, matrices, mask=None, full_output=False, epoch=None):
    """Run a single epoch of the filter: prediction, likelihood and update.

    Parameters
    ----------
    s : ndarray, shape (n_states,)
        Filtered state from the previous epoch.
    P : ndarray, shape (n_states, n_states)
        Filtered covariance from the previous epoch.
    y : ndarray, shape (n_obs,)
        Observation vector, possibly with missing values.
    matrices : tuple
        Arrays ``(C, T, R, D, M, Q)`` for this epoch, see `SystemMatrices.resolve`.
    mask : ndarray of bool, shape (n_obs,) or None, optional
        Which observations are present. If None (default), NaN values are treated
        as missing.
    full_output : bool, optional
        Whether to include prediction results. Default is False.
    epoch : int or None, optional
        Epoch index, only used in error messages.

    Returns
    -------
    Bunch with the following fields:

        - s, P : ndarray
            Filtered state and covariance.
        - e : ndarray, shape (n_present,)
            Prediction error for present observations.
        - log_likelihood : float
            Log-likelihood contribution.
        - n_present : int
            Number of present observations.

    If `full_output` is True, additionally:

        - s_pred, P_pred : ndarray
            Predicted state and covariance.
        - y_pred, Py_pred : ndarray
            Predicted mean and covariance of all observations, computed with the
            full measurement equation.
    """
    C, T, R, D, M, Q = matrices
    if mask is None:
        mask = observed_mask(y)

    s_pred, P_pred = kf_predict(s, P, C, T, R)
    y_k, D_k, M_k, Q_k, n_present = adapt_measurement(y, D, M, Q, mask)
    s_filt, P_filt, e, log_likelihood = kf_update(s_pred, P_pred, y_k, D_k, M_k, Q_k,
                                                  epoch)

    result = Bunch(s=s_filt, P=P_filt, e=e, log_likelihood=log_likelihood,
                   n_present=n_present)
    if full_output:
        result.s_pred = s_pred
        result.P_pred = P_pred
        result.y_pred = D + M @ s_pred
        result.Py_pred = symmetrize(M @ P_pred @ M.T + Q)
    return result


def run_filter(observations, system_matrices, s0, P0, full_output=False,
               n_epochs=None, missing_value=np.nan):
    """Run linear Kalman filter and compute log-likelihood of observations.

    The model is::

        s_k = C_k + T_k s_{k - 1} + e_k,    e_k ~ N(0, R_k)
        y_k = D_k + M_k s_k + eta_k,        eta_k ~ N(0, Q_k)

    where ``s_{-1}`` is distributed as ``N(s0, P0)``. That is the first epoch starts
    with the prediction step.

    Missing observations are excluded from the measurement equation at the
    corresponding epoch. When all observations are missing, the update step is
    skipped and the epoch contributes zero to the log-likelihood.

    Parameters
    ----------
    observations : array_like, shape (n_obs, n_epochs)
        Observation vectors stacked as columns, missing values are marked by
        `missing_value`.
    system_matrices : mapping or SystemMatrices
        Model arrays with keys 'C', 'T', 'R', 'D', 'M', 'Q'. Each array is either
        static or time-varying, see `SystemMatrices.from_mapping`.
    s0 : array_like, shape (n_states,)
        Initial state mean.
    P0 : array_like, shape (n_states, n_states)
        Initial state covariance.
    full_output : bool, optional
        Whether to save prediction results for each epoch. Default is False.
    n_epochs : int or None, optional
        Expected number of epochs. If None (default), determined from `observations`.
    missing_value : float, optional
        Value marking missing observations, NaN values are always treated as missing.
        Default is NaN.

    Returns
    -------
    Bunch object with the following fields:

        - log_likelihood : float
            Total log-likelihood.
        - log_likelihood_steps : ndarray, shape (n_epochs,)
            Log-likelihood contribution of each epoch.
        - final_state : ndarray, shape (n_states,)
            Filtered state at the last epoch.
        - final_covariance : ndarray, shape (n_states, n_states)
            Filtered covariance at the last epoch.
        - filtered_states : ndarray, shape (n_epochs, n_states)
            Filtered states.
        - filtered_covariances : ndarray, shape (n_epochs, n_states, n_states)
            Filtered covariances.
        - prediction_errors : list of n_epochs ndarray
            Prediction errors for present observations only.
        - observed : ndarray of bool, shape (n_epochs, n_obs)
            Which observations were present at each epoch.

    If `full_output` is True, additionally:

        - predicted_states : ndarray, shape (n_epochs, n_states)
            Predicted states.
        - predicted_covariances : ndarray, shape (n_epochs, n_states, n_states)
            Predicted covariances.
        - predicted_observations : ndarray, shape (n_epochs, n_obs)
            Predicted observations including missing ones.
        - predicted_observation_covariances : ndarray, shape (n_epochs, n_obs, n_obs)
            Covariances of predicted observations including missing ones.

    Raises
    ------
    ConfigurationError
        If model arrays are missing or have inconsistent shapes.
    InvalidInputError
        If observations are malformed.
    NumericalError
        If the observation covariance is not positive definite at some epoch.
    """
    Y, mask = check_observations(observations, n_epochs, missing_value)
    n_epochs = Y.shape[1]

    if isinstance(system_matrices, SystemMatrices):
        system_matrices.check_n_epochs(n_epochs)
    else:
        system_matrices = SystemMatrices.from_mapping(system_matrices, n_epochs)

    n_states = system_matrices.n_states
    n_obs = system_matrices.n_obs
    if len(Y) != n_obs:
        raise ConfigurationError("Observations and D must imply the same number of "
                                 "observables, got {} and {}".format(len(Y), n_obs))
    s0, P0 = check_initial_state(s0, P0, n_states)

    logger.debug("Running filter with %d states, %d observables, %d epochs, "
                 "time-varying arrays: %s", n_states, n_obs, n_epochs,
                 ", ".join(system_matrices.time_varying) or "none")

    log_likelihood_steps = np.empty(n_epochs)
    s_filt = np.empty((n_epochs, n_states))
    P_filt = np.empty((n_epochs, n_states, n_states))
    prediction_errors = []
    if full_output:
        s_pred = np.empty((n_epochs, n_states))
        P_pred = np.empty((n_epochs, n_states, n_states))
        y_pred = np.empty((n_epochs, n_obs))
        Py_pred = np.empty((n_epochs, n_obs, n_obs))

    s = s0
    P = P0
    log_likelihood = 0.0
    for k in range(n_epochs):
        step = filter_step(s, P, Y[:, k], system_matrices.resolve(k), mask[:, k],
                           full_output, k)
        if step.n_present == 0:
            logger.debug("All observations are missing at epoch %d", k)

        s = step.s
        P = step.P
        log_likelihood += step.log_likelihood

        log_likelihood_steps[k] = step.log_likelihood
        s_filt[k] = s
        P_filt[k] = P
        prediction_errors.append(step.e)
        if full_output:
            s_pred[k] = step.s_pred
            P_pred[k] = step.P_pred
            y_pred[k] = step.y_pred
            Py_pred[k] = step.Py_pred

    logger.debug("Filter finished, log-likelihood %g", log_likelihood)

    result = Bunch(log_likelihood=log_likelihood,
                   log_likelihood_steps=log_likelihood_steps,
                   final_state=s, final_covariance=P,
                   filtered_states=s_filt, filtered_covariances=P_filt,
                   prediction_errors=prediction_errors,
                   observed=mask.T.copy())
    if full_output:
        result.predicted_states = s_pred
        result.predicted_covariances = P_pred
        result.predicted_observations = y_pred
        result.predicted_observation_covariances = Py_pred
    return result
