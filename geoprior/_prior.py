"""
_prior.py
=========
Flat prior over a geographical region for the location of one tree node.

Public API
----------
  GeoPrior(region, location, tree, taxon=None, taxonset=None,
           is_inside=True, id='GeoPrior')

  .initialise()
  .evaluate()             -> 0.0 | -inf   (alias: calculate_log_p)
  .target_node            -> int
  .log_header(out), .log(sample_nr, out)
  .sample(rng=None)       -> (lat, long)

Target modes
------------
The constrained node is chosen once, on initialisation:

  'tip'   ``taxon`` given: the leaf carrying that name.
  'root'  ``taxonset`` covers every taxon: ``tree.root``, re-read on each
          evaluation because topology moves can change the root.
  'mrca'  ``taxonset`` is a proper subset: the node whose subtree spans
          exactly those taxa, re-located on each evaluation.

Deferred initialisation
-----------------------
The constructor only validates arguments and fits the location parameter
to the tree.  Name resolution waits for ``initialise()``, which the host
may call once its own setup has settled the node numbering; otherwise it
runs transparently on the first ``evaluate()``, ``log()`` or
``target_node`` access.  ``initialise()`` is idempotent.
"""

import math
from typing import Optional, Sequence

from geoprior._logging import (
    log_location_resize,
    log_mrca_relocated,
    log_prior_target,
)
from geoprior._mrca import MRCALocator


TIP = "tip"
ROOT = "root"
MRCA = "mrca"


class GeoPrior:
    """
    Hard indicator prior: log P is 0 when the target node's location is on
    the requested side of the region boundary, -inf otherwise.

    Attributes
    ----------
    region    : Region
    location  : LocationParameter
    tree      : Tree
    is_inside : bool            Polarity flag.
    id        : str
    mode      : str or None     'tip', 'root' or 'mrca' once initialised.
    log_p     : float           Result of the last evaluation.
    """

    def __init__(
        self,
        region,
        location,
        tree,
        taxon: Optional[str] = None,
        taxonset: Optional[Sequence[str]] = None,
        is_inside: bool = True,
        id: str = "GeoPrior",
    ) -> None:
        """
        Parameters
        ----------
        region : Region
            Region to be in (or not, depending on *is_inside*).
        location : LocationParameter
            Per-node (latitude, longitude) storage; resized to the tree.
        tree : Tree
            Tree supplying the taxon set and topology.
        taxon : str or None
            Constrain a single tip.
        taxonset : sequence of str or None
            Constrain the MRCA of these taxa; all taxa selects the root.
        is_inside : bool
            True for a prior on being inside the region, False for outside.

        Raises
        ------
        ValueError   if both or neither of *taxon* / *taxonset* are given,
                     or *location* does not hold 2 values per node.
        """
        if (taxon is None) == (taxonset is None):
            raise ValueError(
                f"{id}: exactly one of 'taxon' or 'taxonset' must be specified."
            )
        if location.minor_dimension != 2:
            raise ValueError(
                f"{id}: expected location parameter to have minor dimension 2, "
                f"got {location.minor_dimension}."
            )

        self.region = region
        self.location = location
        self.tree = tree
        self.taxon = taxon
        self.taxonset = None if taxonset is None else list(taxonset)
        self.is_inside = bool(is_inside)
        self.id = id

        # 2 values per node: 4 * n_taxa - 2 for a bifurcating tree.
        expected = 2 * max(tree.n_nodes, 2 * tree.n_leaves - 1)
        if location.dimension != expected:
            log_location_resize(id, location.dimension, expected)
            location.set_dimension(expected)

        self.mode: Optional[str] = None
        self.log_p: float = -math.inf
        self._node: int = -1
        self._locator: Optional[MRCALocator] = None
        self._initialised = False

    # ================================================================== #
    # Initialisation                                                       #
    # ================================================================== #

    def initialise(self) -> None:
        """
        Resolve the target mode and node.  Safe to call more than once.

        Raises
        ------
        KeyError     if a taxon name is not in the tree.
        ValueError   if the taxon set has duplicates or is not a clade, or
                     the tree repeats the tip name being constrained.
        """
        if self._initialised:
            return

        taxon_names = self.tree.taxon_names
        if self.taxon is not None:
            try:
                self._node = self.tree.leaf_index(self.taxon)
            except KeyError:
                raise KeyError(
                    f"Could not find taxon {self.taxon}. Typo perhaps?"
                ) from None
            self.mode = TIP
            n_target = 1
        else:
            locator = MRCALocator(taxon_names, self.taxonset)
            n_target = locator.n_target
            if n_target == len(taxon_names):
                self.mode = ROOT
                self._node = int(self.tree.root)
            else:
                self.mode = MRCA
                self._locator = locator
                self._node = self._locate_mrca()

        self._initialised = True
        log_prior_target(self.id, self.mode, self._node, n_target)

    def _locate_mrca(self) -> int:
        node = self._locator.locate(self.tree)
        if node is None:
            raise ValueError(
                f"{self.id}: taxon set {self.taxonset} is not a clade in the "
                f"current tree; cannot locate its MRCA."
            )
        return node

    def _resolve_target(self) -> int:
        if not self._initialised:
            self.initialise()
        if self.mode == ROOT:
            self._node = int(self.tree.root)
        elif self.mode == MRCA:
            node = self._locate_mrca()
            log_mrca_relocated(self.id, self._node, node)
            self._node = node
        return self._node

    @property
    def target_node(self) -> int:
        """Node index currently constrained by this prior."""
        return self._resolve_target()

    # ================================================================== #
    # Evaluation                                                           #
    # ================================================================== #

    def evaluate(self) -> float:
        """
        Return 0.0 if the target node lies on the requested side of the
        region, ``-inf`` otherwise.  The value is also stored in ``log_p``.
        """
        node = self._resolve_target()
        lat, lon = self.location.get_matrix_values(node)
        inside = self.region.is_inside(float(lat), float(lon))
        self.log_p = 0.0 if inside == self.is_inside else -math.inf
        return self.log_p

    calculate_log_p = evaluate

    def sample(self, rng=None):
        """Draw a location from the region (see ``Region.sample``)."""
        return self.region.sample(self.is_inside, rng)

    # ================================================================== #
    # Text logging                                                         #
    # ================================================================== #

    def log_header(self, out) -> None:
        """Write the two column names for this prior to *out*."""
        out.write(f"{self.id}.latitude\t")
        out.write(f"{self.id}.longitude\t")

    def log(self, sample_nr: int, out) -> None:
        """Write the target node's latitude and longitude to *out*."""
        lat, lon = self.location.get_matrix_values(self._resolve_target())
        out.write(f"{float(lat)}\t")
        out.write(f"{float(lon)}\t")

    def __repr__(self) -> str:
        selector = f"taxon={self.taxon!r}" if self.taxon is not None else (
            f"taxonset={self.taxonset!r}"
        )
        return f"GeoPrior(id={self.id!r}, {selector}, is_inside={self.is_inside})"
