"""Numba-compatible SE3 utilities.

This module provides pure-numba implementations of SE3 operations
for use in performance-critical code paths. SE3 transforms are
represented as 4x4 numpy arrays (homogeneous transformation matrices).
"""

import numpy as np
from numba import njit  # type: ignore[import-untyped]


@njit(cache=True)
def se3_identity(out: np.ndarray) -> None:
    """Set out to identity SE3 (4x4)."""
    out[:] = 0.0
    out[0, 0] = 1.0
    out[1, 1] = 1.0
    out[2, 2] = 1.0
    out[3, 3] = 1.0


@njit(cache=True)
def se3_mdh(alpha: float, a: float, theta: float, d: float, out: np.ndarray) -> None:
    """Modified DH link transform: Rx(alpha) * Tx(a) * Rz(theta) * Tz(d)."""
    ca = np.cos(alpha)
    sa = np.sin(alpha)
    ct = np.cos(theta)
    st = np.sin(theta)
    out[0, 0] = ct
    out[0, 1] = -st
    out[0, 2] = 0.0
    out[0, 3] = a
    out[1, 0] = st * ca
    out[1, 1] = ct * ca
    out[1, 2] = -sa
    out[1, 3] = -sa * d
    out[2, 0] = st * sa
    out[2, 1] = ct * sa
    out[2, 2] = ca
    out[2, 3] = ca * d
    out[3, 0] = 0.0
    out[3, 1] = 0.0
    out[3, 2] = 0.0
    out[3, 3] = 1.0


@njit(cache=True)
def se3_mul(A: np.ndarray, B: np.ndarray, out: np.ndarray) -> None:
    """SE3 multiplication: out = A @ B (4x4 matrix multiply)."""
    for i in range(4):
        for j in range(4):
            out[i, j] = (
                A[i, 0] * B[0, j]
                + A[i, 1] * B[1, j]
                + A[i, 2] * B[2, j]
                + A[i, 3] * B[3, j]
            )


@njit(cache=True)
def se3_copy(src: np.ndarray, dst: np.ndarray) -> None:
    """Copy SE3 matrix."""
    for i in range(4):
        for j in range(4):
            dst[i, j] = src[i, j]


@njit(cache=True)
def mdh_chain(
    q: np.ndarray,
    dh: np.ndarray,
    tool: np.ndarray,
    origins: np.ndarray,
    out: np.ndarray,
) -> None:
    """Chain the modified-DH links for joint angles ``q`` and append ``tool``.

    ``dh`` rows are (a, d, alpha). ``origins`` receives the base and every
    link frame origin (n+1 rows); ``out`` receives the tool transform.
    """
    link = np.empty((4, 4))
    acc = np.empty((4, 4))
    tmp = np.empty((4, 4))
    se3_identity(acc)
    origins[0, 0] = 0.0
    origins[0, 1] = 0.0
    origins[0, 2] = 0.0
    for i in range(q.shape[0]):
        se3_mdh(dh[i, 2], dh[i, 0], q[i], dh[i, 1], link)
        se3_mul(acc, link, tmp)
        se3_copy(tmp, acc)
        origins[i + 1, 0] = acc[0, 3]
        origins[i + 1, 1] = acc[1, 3]
        origins[i + 1, 2] = acc[2, 3]
    se3_mul(acc, tool, out)
