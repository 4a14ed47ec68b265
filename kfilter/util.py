"""Utility functions."""
import numpy as np


class Bunch(dict):
    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name)

    __setattr__ = dict.__setitem__
    __delattr__ = dict.__delitem__

    def __repr__(self):
        if self.keys():
            m = max(map(len, list(self.keys()))) + 1
            return '\n'.join(['{}: {}'.format(k.rjust(m), type(v))
                              for k, v in self.items()])
        else:
            return self.__class__.__name__ + "()"

    def __dir__(self):
        return list(self.keys())


def compute_rms(data):
    """Compute root-mean-square of data along 0 axis."""
    return np.mean(np.square(data), axis=0) ** 0.5


def symmetrize(P):
    """Return the symmetric part of a square matrix, i.e. ``0.5 * (P + P.T)``."""
    return 0.5 * (P + P.T)


def is_symmetric(P, rtol=1e-10):
    """Check whether square matrices are symmetric up to rounding errors.

    Parameters
    ----------
    P : ndarray, shape (..., n, n)
        Matrix or a stack of matrices.
    rtol : float, optional
        Tolerance relative to the largest absolute element. Default is 1e-10.

    Returns
    -------
    bool
    """
    P = np.asarray(P)
    scale = np.max(np.abs(P), initial=0.0)
    return bool(np.all(np.abs(P - np.swapaxes(P, -1, -2)) <= rtol * scale))
