"""
_region.py
==========
A geographical region represented as a colour raster over a latitude /
longitude bounding box.

Public API
----------
  Region(raster=None, bounds=(-90, 90, -180, 180), region_color=0x00FF00,
         width=None, height=None)
      Constructor.  Copies the raster and freezes it.

  Region.from_quadrangle(corners, ...)
      Rasterize a convex quadrangle given by four (lat, long) corners.

  .cell_index(lat, long)
  .is_inside(lat, long)
  .contains(lats, longs, backend='best')
  .sample(is_inside=True, rng=None)

Raster layout
-------------
``raster[i_lat, i_long]`` holds a 0xRRGGBB colour.  Rows map latitude and
columns map longitude, both with a linear, non-wrapping scale:

    i_lat  = floor(height * (lat  - min_lat)  / (max_lat  - min_lat))
    i_long = floor(width  * (long - min_long) / (max_long - min_long))

Row 0 is ``min_lat``; column 0 is ``min_long``.  Indices outside
``[0, height) x [0, width)`` are outside the region, so coordinates exactly
at ``max_lat`` or ``max_long`` are never inside.

Image decoding is left to the caller: pass either a 2-D integer array of
packed colours or a 3-D ``(height, width, 3)`` RGB array (an alpha channel,
if present, is ignored).

Logging
-------
On first import the module logs system and numba status at INFO level.
``contains`` logs the selected backend at INFO level on every call.
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from geoprior._backend import (
    check_numba_available,
    get_available_backends,
    resolve_backend,
)
from geoprior._context import get_backend_override
from geoprior._geometry import point_in_quadrangle
from geoprior._kernels import _contains_njit
from geoprior._logging import (
    log_backend_availability,
    log_optimization_status,
    log_outside_sampling_request,
    log_region_summary,
)

logger = logging.getLogger(__name__)

_NUMBA_AVAILABLE = check_numba_available()
_BACKENDS_AVAILABLE = get_available_backends()

log_optimization_status(_NUMBA_AVAILABLE)
log_backend_availability(_BACKENDS_AVAILABLE)

DEFAULT_BOUNDS = (-90.0, 90.0, -180.0, 180.0)
DEFAULT_REGION_COLOR = 0x00FF00
DEFAULT_SIZE = 1024

_COLOR_MASK = 0xFFFFFF


def _pack_raster(raster) -> np.ndarray:
    """
    **Private.**  Return *raster* as a C-contiguous int64 array of 0xRRGGBB
    colours with shape (height, width).

    Raises
    ------
    ValueError   if *raster* is not 2-D, or 3-D with 3 or 4 channels.
    """
    arr = np.asarray(raster)
    if arr.ndim == 2:
        packed = arr.astype(np.int64) & _COLOR_MASK
    elif arr.ndim == 3 and arr.shape[2] in (3, 4):
        rgb = arr[:, :, :3].astype(np.int64) & 0xFF
        packed = (rgb[:, :, 0] << 16) | (rgb[:, :, 1] << 8) | rgb[:, :, 2]
    else:
        raise ValueError(
            f"Raster must be (height, width) colours or (height, width, 3) "
            f"RGB; got shape {arr.shape}."
        )
    if packed.shape[0] == 0 or packed.shape[1] == 0:
        raise ValueError(f"Raster must not be empty; got shape {packed.shape}.")
    return np.ascontiguousarray(packed)


def _lower_corner(lo: float, hi: float, n: int, i: int) -> float:
    """
    **Private.**  Return the lower edge of cell *i* as a float that the cell
    mapping ``floor(n * (x - lo) / (hi - lo))`` sends back to cell *i*.

    The plain expression ``lo + (hi - lo) * i / n`` can round to just below
    the cell edge when the cell size is not exactly representable, so it is
    nudged up one ulp at a time until it maps back to *i*.
    """
    x = lo + (hi - lo) * i / n
    while n * (x - lo) / (hi - lo) < i:
        x = math.nextafter(x, math.inf)
    return x


class Region:
    """
    An immutable raster-backed region for point-in-region queries.

    Attributes (all read-only after construction)
    ----------------------------------------------
    min_lat, max_lat, min_long, max_long : float   Bounding box.
    height, width   : int        Raster dimensions (rows, columns).
    region_color    : int        Membership colour, 0xRRGGBB.
    raster          : int64 [height, width]   Non-writeable colour raster.
    n_cells_inside  : int        Number of cells with the membership colour.
    """

    def __init__(
        self,
        raster=None,
        bounds: Tuple[float, float, float, float] = DEFAULT_BOUNDS,
        region_color: int = DEFAULT_REGION_COLOR,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> None:
        """
        Parameters
        ----------
        raster : array-like or None
            Decoded image.  None gives an all-black ``height x width`` raster
            (1024 x 1024 unless specified), which contains nothing.
        bounds : (min_lat, max_lat, min_long, max_long)
        region_color : int
            Colour marking membership; only the low 24 bits are used.
        width, height : int or None
            Raster size for the blank raster.  When *raster* is given they
            are optional and must match its shape.

        Raises
        ------
        ValueError   for inverted or empty bounds, a malformed raster, or
                     width/height that disagree with the raster.
        """
        min_lat, max_lat, min_long, max_long = (float(v) for v in bounds)
        if not (min_lat < max_lat and min_long < max_long):
            raise ValueError(
                f"Bounds must satisfy min_lat < max_lat and min_long < max_long; "
                f"got {tuple(bounds)}."
            )

        if raster is None:
            h = DEFAULT_SIZE if height is None else int(height)
            w = DEFAULT_SIZE if width is None else int(width)
            if h <= 0 or w <= 0:
                raise ValueError(f"Raster size must be positive; got {h}x{w}.")
            packed = np.zeros((h, w), dtype=np.int64)
        else:
            packed = _pack_raster(raster)
            if (height is not None and int(height) != packed.shape[0]) or (
                width is not None and int(width) != packed.shape[1]
            ):
                raise ValueError(
                    f"Raster shape {packed.shape} does not match "
                    f"height={height}, width={width}."
                )

        packed.flags.writeable = False

        self.min_lat = min_lat
        self.max_lat = max_lat
        self.min_long = min_long
        self.max_long = max_long
        self.raster = packed
        self.height: int = int(packed.shape[0])
        self.width: int = int(packed.shape[1])
        self.region_color: int = int(region_color) & _COLOR_MASK
        self.n_cells_inside: int = int(np.count_nonzero(packed == self.region_color))

        log_region_summary(
            self.height, self.width, self.bounds, self.region_color, self.n_cells_inside
        )

    @classmethod
    def from_quadrangle(
        cls,
        corners,
        bounds: Tuple[float, float, float, float] = DEFAULT_BOUNDS,
        region_color: int = DEFAULT_REGION_COLOR,
        width: int = DEFAULT_SIZE,
        height: int = DEFAULT_SIZE,
    ) -> "Region":
        """
        Build a region by rasterizing a convex quadrangle.

        A cell belongs to the region when its centre lies inside the
        quadrangle.

        Parameters
        ----------
        corners : sequence of four (lat, long) pairs, in winding order.

        Returns
        -------
        Region
        """
        if len(corners) != 4:
            raise ValueError(f"A quadrangle needs 4 corners; got {len(corners)}.")
        qa, qb, qc, qd = (tuple(float(v) for v in corner) for corner in corners)
        min_lat, max_lat, min_long, max_long = (float(v) for v in bounds)

        rows = np.arange(height, dtype=np.float64)
        cols = np.arange(width, dtype=np.float64)
        centre_lat = min_lat + (rows + 0.5) * (max_lat - min_lat) / height
        centre_long = min_long + (cols + 0.5) * (max_long - min_long) / width
        lat_grid, long_grid = np.meshgrid(centre_lat, centre_long, indexing="ij")

        inside = point_in_quadrangle((lat_grid, long_grid), qa, qb, qc, qd)
        raster = np.where(inside, region_color & _COLOR_MASK, 0).astype(np.int64)
        return cls(raster, bounds=bounds, region_color=region_color)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(min_lat, max_lat, min_long, max_long)"""
        return (self.min_lat, self.max_lat, self.min_long, self.max_long)

    def cell_index(self, lat: float, lon: float) -> Optional[Tuple[int, int]]:
        """
        Return the raster cell ``(i_lat, i_long)`` holding the coordinate, or
        None when it maps outside the raster.  Never raises, including for
        NaN or infinite input.
        """
        f_lat = self.height * (lat - self.min_lat) / (self.max_lat - self.min_lat)
        f_long = self.width * (lon - self.min_long) / (self.max_long - self.min_long)
        # NaN fails every comparison, so it is rejected here as well.
        if not (0.0 <= f_lat < self.height and 0.0 <= f_long < self.width):
            return None
        return int(math.floor(f_lat)), int(math.floor(f_long))

    def is_inside(self, lat: float, lon: float) -> bool:
        """
        Return True if the coordinate's raster cell has the region colour.

        Coordinates outside the bounding box (or exactly on its upper edges)
        are outside the region.
        """
        cell = self.cell_index(lat, lon)
        if cell is None:
            return False
        return int(self.raster[cell]) == self.region_color

    def contains(self, lats, longs, backend: str = "best") -> np.ndarray:
        """
        Vectorised ``is_inside`` over paired coordinate arrays.

        Parameters
        ----------
        lats, longs : array-like of float, equal length
        backend : str, default 'best'
            'python' (reference loop), 'cpu-parallel' (numba kernel) or
            'best'.  A ``use_backend`` context overrides this argument.

        Returns
        -------
        np.ndarray[bool]
        """
        lats = np.ascontiguousarray(lats, dtype=np.float64).ravel()
        longs = np.ascontiguousarray(longs, dtype=np.float64).ravel()
        if lats.shape != longs.shape:
            raise ValueError(
                f"lats and longs must have equal length; got "
                f"{lats.shape[0]} and {longs.shape[0]}."
            )

        backend_override = get_backend_override()
        if backend_override is not None:
            backend = backend_override
        resolved_backend = resolve_backend(backend)
        logger.info(f"contains(n={lats.shape[0]}, backend={resolved_backend!r})")

        if resolved_backend == "cpu-parallel":
            return _contains_njit(
                lats,
                longs,
                self.raster,
                self.region_color,
                self.min_lat,
                self.max_lat,
                self.min_long,
                self.max_long,
            )
        if resolved_backend == "python":
            out = np.zeros(lats.shape[0], dtype=np.bool_)
            for k in range(lats.shape[0]):
                out[k] = self.is_inside(float(lats[k]), float(longs[k]))
            return out
        raise RuntimeError(f"Internal error: unhandled backend {resolved_backend!r}")

    def sample(
        self, is_inside: bool = True, rng: Optional[np.random.Generator] = None
    ) -> Tuple[float, float]:
        """
        Draw a location uniformly over the cells of the region colour.

        Rejection sampling over raster cells; the lowest coordinate that
        maps back to the accepted cell is returned (no jitter within the cell).

        Parameters
        ----------
        is_inside : bool
            Requested polarity.  Cells of the region colour are drawn either
            way; ``False`` is logged as a warning.
        rng : numpy.random.Generator or None
            Source of randomness; a fresh ``default_rng()`` when None.

        Returns
        -------
        (lat, long)

        Raises
        ------
        ValueError   if no cell has the region colour.
        """
        if not is_inside:
            log_outside_sampling_request()
        if self.n_cells_inside == 0:
            raise ValueError(
                f"Cannot sample: region colour 0x{self.region_color:06X} "
                f"does not occur in the raster."
            )
        if rng is None:
            rng = np.random.default_rng()

        n_cells = self.width * self.height
        flat = self.raster.ravel()
        while True:
            i = int(rng.integers(n_cells))
            if int(flat[i]) == self.region_color:
                break

        row, col = divmod(i, self.width)
        lat = _lower_corner(self.min_lat, self.max_lat, self.height, row)
        lon = _lower_corner(self.min_long, self.max_long, self.width, col)
        return lat, lon

    def __repr__(self) -> str:
        return (
            f"Region({self.height}x{self.width}, bounds={self.bounds}, "
            f"region_color=0x{self.region_color:06X})"
        )
