"""
_logging.py
===========
Logging functions for geoprior.

All functions in this module have NO side effects except logging. They take
computed data as parameters and format/emit log messages.

This separation ensures:
- Logging can be easily disabled/mocked in tests
- Computation is separate from presentation
"""

import logging
from typing import List

logger = logging.getLogger(__name__)


# ============================================================================ #
# System and Backend Logging (called at module import time)
# ============================================================================ #


def log_optimization_status(numba_available: bool) -> None:
    """
    Log system capabilities and numba availability at INFO level.

    Called once, when ``geoprior._region`` is first imported.

    Parameters
    ----------
    numba_available : bool
        Whether numba was successfully imported.
    """
    import os
    import platform

    cpu_count = os.cpu_count() or 1
    logger.info(
        f"System: {platform.machine()} ({platform.system()}), "
        f"{cpu_count} CPU cores, Python {platform.python_version()}"
    )

    if numba_available:
        import numba

        logger.info(f"Numba {numba.__version__} loaded successfully")
        try:
            logger.info(f"Numba threading: {numba.get_num_threads()} threads")
        except Exception:
            pass  # Threading info unavailable in some configs
    else:
        logger.info("Numba not importable; batch containment limited to 'python'")


def log_backend_availability(backends_available: List[str]) -> None:
    """
    Log which execution backends are available for batch containment.

    Parameters
    ----------
    backends_available : List[str]
        List of available backends (e.g., ['python', 'cpu-parallel']).
    """
    logger.info(f"Available backends: {', '.join(backends_available)}")
    if "cpu-parallel" in backends_available:
        logger.info("  cpu-parallel: LLVM-compiled parallel code (numba.njit + prange)")
    logger.info("  python: unoptimized reference implementation")
    logger.info(f"Default backend='best' will use: {backends_available[-1]}")


# ============================================================================ #
# Region Logging
# ============================================================================ #


def log_region_summary(
    height: int,
    width: int,
    bounds: tuple,
    region_color: int,
    n_cells_inside: int,
) -> None:
    """
    Log raster geometry and coverage of a newly built region.

    Parameters
    ----------
    height, width : int
        Raster dimensions.
    bounds : tuple
        (min_lat, max_lat, min_long, max_long).
    region_color : int
        Membership colour.
    n_cells_inside : int
        Number of raster cells carrying the membership colour.
    """
    n_cells = height * width
    logger.info(
        "Region raster %dx%d over lat [%g, %g], long [%g, %g]; "
        "colour 0x%06X covers %d cells (%.1f%%)",
        height,
        width,
        bounds[0],
        bounds[1],
        bounds[2],
        bounds[3],
        region_color,
        n_cells_inside,
        100.0 * n_cells_inside / n_cells,
    )
    if n_cells_inside == 0:
        logger.warning(
            "Region colour 0x%06X does not occur in the raster: every "
            "coordinate will test as outside and sampling is impossible.",
            region_color,
        )


def log_outside_sampling_request() -> None:
    """Flag a request to sample locations outside the region."""
    logger.warning(
        "Sampling with is_inside=False still draws cells of the region "
        "colour; locations outside the region are not sampled."
    )


# ============================================================================ #
# Tree Logging
# ============================================================================ #


def log_multifurcation_warning(n_extra: int, n_leaves: int) -> None:
    """
    Emit consolidated multifurcation warning.

    Parameters
    ----------
    n_extra : int
        Number of zero-length bifurcations added.
    n_leaves : int
        Number of leaves in the tree.
    """
    logger.warning(
        "Input tree with %d leaves is not strictly bifurcating: %d "
        "multifurcation(s) resolved into zero-length bifurcations. "
        "The order of splitting is arbitrary.",
        n_leaves,
        n_extra,
    )


# ============================================================================ #
# Prior Logging
# ============================================================================ #


def log_location_resize(prior_id: str, old_dimension: int, new_dimension: int) -> None:
    """
    Warn that the location parameter is being resized to fit the tree.

    Parameters
    ----------
    prior_id : str
        Identifier of the prior doing the resize.
    old_dimension, new_dimension : int
        Total number of values before and after.
    """
    logger.warning(
        "%s: setting dimension of location parameter to 2 x number of "
        "nodes = %d (from %d)",
        prior_id,
        new_dimension,
        old_dimension,
    )


def log_prior_target(prior_id: str, mode: str, node: int, n_target: int) -> None:
    """
    Log how a prior resolved its target node on initialisation.

    Parameters
    ----------
    prior_id : str
        Identifier of the prior.
    mode : str
        'tip', 'root' or 'mrca'.
    node : int
        Resolved node index.
    n_target : int
        Number of taxa the target spans.
    """
    logger.info(
        "%s: constraining %s node %d (%d taxa)", prior_id, mode, node, n_target
    )


def log_mrca_relocated(prior_id: str, old_node: int, new_node: int) -> None:
    """Record at DEBUG level that the MRCA moved to a different node."""
    if old_node != new_node:
        logger.debug("%s: MRCA moved from node %d to %d", prior_id, old_node, new_node)
