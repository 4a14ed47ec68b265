"""Example state-space models with simulated observations."""
from dataclasses import dataclass
import numpy as np
from scipy._lib._util import check_random_state


@dataclass
class LinearProblemExample:
    """Example of a linear state-space problem.

    Parameters
    ----------
    system_matrices : dict
        Model arrays with keys 'C', 'T', 'R', 'D', 'M', 'Q'.
        See `kfilter.run_filter` for a detailed definition.
    s0 : ndarray, shape (n_states,)
        Initial state mean.
    P0 : ndarray, shape (n_states, n_states)
        Initial state covariance.
    observations : ndarray, shape (n_obs, n_epochs)
        Simulated observations, missing values are NaN.
    n_epochs : int
        Number of epochs.
    st : ndarray, shape (n_epochs, n_states)
        True state for each epoch.
    """
    system_matrices : dict
    s0 : np.ndarray
    P0 : np.ndarray
    observations : np.ndarray
    n_epochs : int
    st : np.ndarray


def _simulate(system_matrices, s0, P0, n_epochs, missing_fraction, rng):
    def at(name, k):
        array = system_matrices[name]
        base_ndim = 1 if name in ('C', 'D') else 2
        return array[k] if array.ndim > base_ndim else array

    n_states = len(s0)
    n_obs = system_matrices['D'].shape[-1]

    st = np.empty((n_epochs, n_states))
    observations = np.empty((n_obs, n_epochs))

    s = rng.multivariate_normal(s0, P0)
    for k in range(n_epochs):
        s = (at('C', k) + at('T', k) @ s +
             rng.multivariate_normal(np.zeros(n_states), at('R', k)))
        st[k] = s
        observations[:, k] = (at('D', k) + at('M', k) @ s +
                              rng.multivariate_normal(np.zeros(n_obs), at('Q', k)))

    if missing_fraction > 0:
        observations[rng.uniform(size=observations.shape) < missing_fraction] = np.nan

    return st, observations


def generate_local_level(n_epochs=1000, level_std=1.0, noise_std=1.0, s0=0.0,
                         P0=1e6, missing_fraction=0.0, rng=0):
    """Generate data for the local level model (random walk plus noise).

    The model is::

        s_k = s_{k - 1} + e_k
        y_k = s_k + eta_k

    Parameters
    ----------
    n_epochs : int
        Number of epochs for simulation.
    level_std : float
        Standard deviation of the level increments.
    noise_std : float
        Standard deviation of the observation noise.
    s0 : float
        Initial level mean.
    P0 : float
        Initial level variance, a large value gives a diffuse prior.
    missing_fraction : float
        Probability of each observation to be missing.
    rng : None, int or `numpy.random.RandomState`
        Seed to create or already created RandomState. None corresponds to
        nondeterministic seeding.

    Returns
    -------
    LinearProblemExample
    """
    rng = check_random_state(rng)
    system_matrices = {
        'C': np.zeros(1),
        'T': np.eye(1),
        'R': np.array([[level_std**2]]),
        'D': np.zeros(1),
        'M': np.eye(1),
        'Q': np.array([[noise_std**2]]),
    }
    s0 = np.array([s0])
    # The simulated trajectory starts from s0 exactly, the diffuse prior is only used
    # by the filter.
    st, observations = _simulate(system_matrices, s0, np.zeros((1, 1)), n_epochs,
                                 missing_fraction, rng)
    return LinearProblemExample(system_matrices, s0, np.array([[P0]]), observations,
                                n_epochs, st)


def generate_linear_pendulum(
    n_epochs=1000,
    s0=np.array([1.0, 0.0]),
    P0=np.diag([0.1**2, 0.05**2]),
    tau=0.1,
    T=10.0,
    eta=0.1,
    qf=0.03,
    sigma_angle=0.2,
    sigma_rate=0.1,
    missing_fraction=0.2,
    rng=0,
):
    """Generate data for an example of a linear pendulum with friction.

    The continuous system model is::

        ds1 / dt = s2
        ds2 / dt = -omega**2 * s1 - 2 * eta * omega * s2 + f

    with ``f`` being an external force. It is discretized with a time step `tau`,
    the external force is modeled as a random white sequence.

    The observations consist of both s1 and s2 (angle and angular rate), each of them
    is independently missing with probability `missing_fraction`.

    Parameters
    ----------
    n_epochs : int
        Number of epochs for simulation.
    s0 : array_like, shape (2,)
        Initial state.
    P0 : array_like, shape (2, 2)
        Initial state covariance.
    tau : float
        Time step in seconds.
    T : float
        Pendulum period in seconds.
    eta : float
        Dimensionless friction coefficient.
    qf : float
        Intensity of force process in rad/s/sqrt(s)
    sigma_angle : float
        Accuracy of angle measurements in rad.
    sigma_rate : float
        Accuracy of angular rate measurements in rad/s.
    missing_fraction : float
        Probability of each observation to be missing.
    rng : None, int or `numpy.random.RandomState`
        Seed to create or already created RandomState. None corresponds to
        nondeterministic seeding.

    Returns
    -------
    LinearProblemExample
    """
    rng = check_random_state(rng)
    s0 = np.asarray(s0)
    P0 = np.asarray(P0)

    omega = 2 * np.pi / T
    F = np.array([[1, tau], [-(omega ** 2) * tau, 1 - 2 * eta * omega * tau]])
    G = np.array([[0], [1]])
    system_matrices = {
        'C': np.zeros(2),
        'T': F,
        'R': G @ np.array([[tau * qf**2]]) @ G.T,
        'D': np.zeros(2),
        'M': np.identity(2),
        'Q': np.diag([sigma_angle**2, sigma_rate**2]),
    }
    st, observations = _simulate(system_matrices, s0, P0, n_epochs, missing_fraction,
                                 rng)
    return LinearProblemExample(system_matrices, s0, P0, observations, n_epochs, st)


def generate_time_varying_factor_model(n_epochs=1000, n_factors=2, n_obs=4, rho=0.8,
                                       loading_drift=0.05, noise_std=0.5,
                                       missing_fraction=0.1, rng=0):
    """Generate data for a dynamic factor model with drifting loadings.

    The factors follow independent AR(1) processes::

        s_k = rho * s_{k - 1} + e_k,    e_k ~ N(0, (1 - rho**2) I)
        y_k = mu + M_k s_k + eta_k,     eta_k ~ N(0, noise_std**2 I)

    The loading matrices ``M_k`` follow a random walk, so ``M`` is time-varying while
    the rest of the arrays are static.

    Parameters
    ----------
    n_epochs : int
        Number of epochs for simulation.
    n_factors : int
        Number of factors (states).
    n_obs : int
        Number of observed series.
    rho : float
        Autoregression coefficient of the factors, must be less than 1 in absolute
        value.
    loading_drift : float
        Standard deviation of the loading increments between epochs.
    noise_std : float
        Standard deviation of the observation noise.
    missing_fraction : float
        Probability of each observation to be missing.
    rng : None, int or `numpy.random.RandomState`
        Seed to create or already created RandomState. None corresponds to
        nondeterministic seeding.

    Returns
    -------
    LinearProblemExample
    """
    rng = check_random_state(rng)
    M = rng.randn(n_obs, n_factors) + np.cumsum(
        loading_drift * rng.randn(n_epochs, n_obs, n_factors), axis=0)
    system_matrices = {
        'C': np.zeros(n_factors),
        'T': rho * np.identity(n_factors),
        'R': (1 - rho**2) * np.identity(n_factors),
        'D': rng.randn(n_obs),
        'M': M,
        'Q': noise_std**2 * np.identity(n_obs),
    }
    s0 = np.zeros(n_factors)
    P0 = np.identity(n_factors)
    st, observations = _simulate(system_matrices, s0, P0, n_epochs, missing_fraction,
                                 rng)
    return LinearProblemExample(system_matrices, s0, P0, observations, n_epochs, st)
