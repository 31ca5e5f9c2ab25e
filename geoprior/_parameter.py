"""
_parameter.py
=============
Per-node coordinate storage.

``LocationParameter`` is a flat float64 buffer viewed as rows of
``minor_dimension`` values; row ``i`` holds the (latitude, longitude) of
node ``i``.  Total length (``dimension``) can be changed after construction,
which a ``GeoPrior`` does to match the tree it constrains.
"""

from typing import Optional

import numpy as np


class LocationParameter:
    """
    Attributes
    ----------
    id              : str
    minor_dimension : int    Values per row (2 for lat/long).
    values          : float64 [dimension]   Flat storage.
    """

    def __init__(
        self,
        values=None,
        dimension: Optional[int] = None,
        minor_dimension: int = 2,
        id: str = "location",
    ) -> None:
        """
        Parameters
        ----------
        values : array-like or None
            Initial values; flattened.  When *dimension* is also given the
            values are repeated (or truncated) to that length.
        dimension : int or None
            Total number of values.  Defaults to ``len(values)``, or
            *minor_dimension* when no values are given.
        minor_dimension : int
            Row width.

        Raises
        ------
        ValueError   if *minor_dimension* or *dimension* is not positive.
        """
        if minor_dimension <= 0:
            raise ValueError(f"minor_dimension must be positive; got {minor_dimension}.")
        if values is None:
            values = np.zeros(dimension if dimension is not None else minor_dimension)
        values = np.asarray(values, dtype=np.float64).ravel()
        if dimension is not None:
            if dimension <= 0:
                raise ValueError(f"dimension must be positive; got {dimension}.")
            values = np.resize(values, dimension)
        if values.shape[0] == 0:
            raise ValueError("LocationParameter needs at least one value.")

        self.id = id
        self.minor_dimension: int = int(minor_dimension)
        self.values = np.array(values, dtype=np.float64)

    @property
    def dimension(self) -> int:
        return int(self.values.shape[0])

    @property
    def n_rows(self) -> int:
        return self.dimension // self.minor_dimension

    def set_dimension(self, dimension: int) -> None:
        """
        Change the total number of values.  Existing values are repeated
        cyclically to fill the new length (``numpy.resize`` semantics).
        """
        if dimension <= 0:
            raise ValueError(f"dimension must be positive; got {dimension}.")
        self.values = np.resize(self.values, dimension)

    def get_matrix_values(self, row: int) -> np.ndarray:
        """Return a copy of row *row* (e.g. ``[lat, long]`` of node *row*)."""
        if not 0 <= row < self.n_rows:
            raise IndexError(f"Row {row} out of range for {self.n_rows} rows.")
        start = row * self.minor_dimension
        return self.values[start : start + self.minor_dimension].copy()

    def set_matrix_values(self, row: int, values) -> None:
        """Overwrite row *row* with *values* (length ``minor_dimension``)."""
        if not 0 <= row < self.n_rows:
            raise IndexError(f"Row {row} out of range for {self.n_rows} rows.")
        values = np.asarray(values, dtype=np.float64).ravel()
        if values.shape[0] != self.minor_dimension:
            raise ValueError(
                f"Expected {self.minor_dimension} values; got {values.shape[0]}."
            )
        start = row * self.minor_dimension
        self.values[start : start + self.minor_dimension] = values

    def as_matrix(self) -> np.ndarray:
        """View of the complete rows as an (n_rows, minor_dimension) array."""
        return self.values[: self.n_rows * self.minor_dimension].reshape(
            self.n_rows, self.minor_dimension
        )

    def __repr__(self) -> str:
        return (
            f"LocationParameter(id={self.id!r}, dimension={self.dimension}, "
            f"minor_dimension={self.minor_dimension})"
        )
