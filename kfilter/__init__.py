"""kfilter: Kalman filter likelihood for linear-Gaussian state-space models.

The package evaluates the exact Gaussian log-likelihood of a multivariate time series
under the model::

    s_k = C_k + T_k s_{k - 1} + e_k,    e_k ~ N(0, R_k)
    y_k = D_k + M_k s_k + eta_k,        eta_k ~ N(0, Q_k)

Where

    - k     - integer epoch index
    - s_k   - state vector
    - y_k   - observation vector
    - e_k   - transition shock
    - eta_k - measurement shock

It is intended to be called repeatedly from parameter estimation procedures
(maximum likelihood or Bayesian), which are not part of the package.

Features:

    - Missing observations: entries marked by NaN (or a custom sentinel) are removed
      from the measurement equation at the corresponding epoch.
    - Time-varying matrices: any of the arrays may be given for each epoch by
      stacking them along the first axis, the others stay static.
    - Optionally, the filtered and predicted states and covariances are returned for
      inspection.

The main entry point is `run_filter`. Individual steps are available as
`kf_predict`, `kf_update` and `filter_step`. Refer to `kfilter.examples` for
examples of correctly defined problems.

References
----------
.. [1] J. D. Hamilton, "Time Series Analysis", Princeton University Press 1994,
   chapter 13
.. [2] J. Durbin, S. J. Koopman, "Time Series Analysis by State Space Methods",
   2nd edition
"""
from . import examples, util
from .errors import (ConfigurationError, InvalidInputError, KalmanFilterError,
                     NumericalError)
from .linear import LOG_2PI, filter_step, kf_predict, kf_update, run_filter
from .measurement import adapt_measurement, observed_mask
from .model import Static, SystemMatrices, TimeVarying
