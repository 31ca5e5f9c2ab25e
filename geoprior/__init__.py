"""
geoprior
========

Flat geographical region priors over the locations of phylogenetic tree
nodes.

A ``GeoPrior`` constrains the (latitude, longitude) of one node (a named
tip, the root, or the MRCA of a taxon set) to lie inside, or outside, a
raster-defined ``Region``.  Evaluation returns a log-probability of 0 or
-inf.

Main Classes
------------
GeoPrior : Region prior on one node's location
Region : Raster-backed point-in-region oracle with uniform sampling
Tree : Rooted phylogenetic tree with NEWICK parsing
LocationParameter : Per-node coordinate storage
MRCALocator : Re-locatable MRCA of a taxon subset

Geometry
--------
area_of_triangle, area_of_quadrangle, intersect_segments,
project_point, reverse_project, point_in_quadrangle

Context Managers
----------------
quiet : Suppress logging during operations
suppress_logger : Suppress specific logger
use_backend : Force specific backend for batch containment

Examples
--------
>>> import numpy as np
>>> from geoprior import GeoPrior, LocationParameter, Region, Tree
>>> raster = np.zeros((180, 360), dtype=np.int64)
>>> raster[90:, 180:] = 0x00FF00          # north-east quadrant
>>> region = Region(raster)
>>> tree = Tree('((A:1,B:1):1,(C:1,D:1):1);')
>>> location = LocationParameter(dimension=14)
>>> location.set_matrix_values(4, [45.0, 90.0])   # node 4 = MRCA(A, B)
>>> prior = GeoPrior(region, location, tree, taxonset=['A', 'B'])
>>> prior.evaluate()
0.0
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Main classes
from ._prior import GeoPrior
from ._region import Region
from ._tree import Tree
from ._parameter import LocationParameter
from ._mrca import MRCALocator, find_mrca, taxon_mask

# Geometry
from ._geometry import (
    area_of_triangle,
    area_of_quadrangle,
    intersect_segments,
    project_point,
    reverse_project,
    point_in_quadrangle,
)

# Context managers
from ._context import (
    suppress_logger,
    quiet,
    use_backend,
)

# Backend information
from ._backend import (
    get_available_backends,
    get_backend_info,
    check_numba_available,
)

# Public API
__all__ = [
    # Main classes
    "GeoPrior",
    "Region",
    "Tree",
    "LocationParameter",
    "MRCALocator",
    "find_mrca",
    "taxon_mask",
    # Geometry
    "area_of_triangle",
    "area_of_quadrangle",
    "intersect_segments",
    "project_point",
    "reverse_project",
    "point_in_quadrangle",
    # Context managers
    "suppress_logger",
    "quiet",
    "use_backend",
    # Backend information
    "get_available_backends",
    "get_backend_info",
    "check_numba_available",
    # Version info
    "__version__",
]
