"""Exceptions raised by the filter."""
import numpy as np


class KalmanFilterError(Exception):
    """Base class for all errors raised by kfilter."""


class ConfigurationError(KalmanFilterError, ValueError):
    """System matrices or initial state are missing or have inconsistent shapes.

    Always raised before the first epoch is processed.
    """


class InvalidInputError(KalmanFilterError, ValueError):
    """Observations can't be interpreted as a real (n_obs, n_epochs) array."""


class NumericalError(KalmanFilterError, np.linalg.LinAlgError):
    """Observation covariance is singular or not positive definite.

    Parameters
    ----------
    message : str
        Error description.
    epoch : int or None, optional
        Epoch index at which the failure occurred.
    """
    def __init__(self, message, epoch=None):
        super().__init__(message)
        self.epoch = epoch
