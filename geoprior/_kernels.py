"""
_kernels.py
===========
numba-compiled kernels for batch region containment.

This module contains ONLY numba-accelerated code and does not import other
project modules.  The kernels take numpy arrays and plain scalars only, so
the ``Region`` wrapper extracts its attributes and forwards them here.

Exported Functions
------------------
_cell_index_nb : njit function
    Linear (non-wrapping) map of one coordinate to a raster cell.

_contains_njit : njit function
    Parallel containment test for many coordinates.

Notes
-----
cache=True persists the compiled binary to disk for faster subsequent runs.
"""

import math

import numpy as np
from numba import njit, prange


@njit(cache=True)
def _cell_index_nb(lat, lon, min_lat, max_lat, min_long, max_long, height, width):
    """
    Return (i_lat, i_long) for one coordinate, or (-1, -1) if it falls
    outside the raster (NaN included).
    """
    f_lat = height * (lat - min_lat) / (max_lat - min_lat)
    f_long = width * (lon - min_long) / (max_long - min_long)
    # Comparisons with NaN are False, so NaN lands in the outside branch.
    if not (f_lat >= 0.0 and f_lat < height and f_long >= 0.0 and f_long < width):
        return -1, -1
    i_lat = int(math.floor(f_lat))
    i_long = int(math.floor(f_long))
    if i_lat >= height or i_long >= width:
        return -1, -1
    return i_lat, i_long


@njit(cache=True, parallel=True)
def _contains_njit(lats, longs, raster, region_color,
                   min_lat, max_lat, min_long, max_long):
    """
    Containment mask for coordinates ``(lats[k], longs[k])``.

    Parameters
    ----------
    lats, longs   : float64[:]   Coordinates, equal length.
    raster        : int64[:, :]  (height, width) colour raster.
    region_color  : int          Membership colour (low 24 bits).

    Returns
    -------
    bool[:]   True where the coordinate's cell has the membership colour.
    """
    n = lats.shape[0]
    height = raster.shape[0]
    width = raster.shape[1]
    out = np.zeros(n, dtype=np.bool_)
    for k in prange(n):
        i_lat, i_long = _cell_index_nb(
            lats[k], longs[k], min_lat, max_lat, min_long, max_long, height, width
        )
        if i_lat >= 0:
            out[k] = (raster[i_lat, i_long] & 0xFFFFFF) == region_color
    return out
