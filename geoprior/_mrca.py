"""
_mrca.py
========
Locate the node whose subtree spans exactly a given set of taxa.

Public API
----------
  taxon_mask(taxon_names, subset_names) -> np.ndarray[bool]
  find_mrca(tree, mask, n_target=None)  -> int | None
  MRCALocator(taxon_names, subset_names)
      .mask, .n_target, .subset_names
      .locate(tree) -> int | None

Algorithm
---------
One post-order pass computes, for every node, the pair

    (n_matched, n_leaves) = (# masked leaves below, # leaves below)

from its children's pairs.  The first node in post-order with
``n_matched == n_leaves == n_target`` is the MRCA: being first in
post-order it is the deepest such node, and no ancestor is inspected after
it.  When no node qualifies, the masked leaves are not a clade under the
current rooting and the result is ``None``.

All scratch state lives in arrays local to the call, so concurrent calls
on the same tree do not interfere.
"""

from typing import Optional, Sequence

import numpy as np


def taxon_mask(taxon_names: Sequence[str], subset_names: Sequence[str]) -> np.ndarray:
    """
    Build a boolean membership mask over leaves.

    Parameters
    ----------
    taxon_names : sequence of str
        All taxa, ordered by leaf index.
    subset_names : sequence of str
        Taxa to mark.

    Returns
    -------
    np.ndarray[bool]   ``mask[i]`` is True iff ``taxon_names[i]`` is in the
                       subset.

    Raises
    ------
    KeyError     if a subset name is not among *taxon_names*.
    ValueError   if a subset name occurs more than once.

    Examples
    --------
    >>> taxon_mask(['A', 'B', 'C', 'D'], ['B', 'D'])
    array([False,  True, False,  True])
    """
    index = {name: i for i, name in enumerate(taxon_names)}
    mask = np.zeros(len(taxon_names), dtype=np.bool_)
    for name in subset_names:
        if name not in index:
            raise KeyError(f"Cannot find taxon '{name}' in tree.")
        i = index[name]
        if mask[i]:
            raise ValueError(
                f"Taxon '{name}' is defined multiple times, while they should be unique."
            )
        mask[i] = True
    return mask


def find_mrca(tree, mask: np.ndarray, n_target: Optional[int] = None) -> Optional[int]:
    """
    Return the node whose leaf set equals the masked taxa, or None.

    Parameters
    ----------
    tree : Tree
        Anything exposing ``postorder()``, ``left_child``, ``right_child``
        and ``n_nodes`` with leaves numbered ``0 … len(mask)-1``.
    mask : np.ndarray[bool]
        Membership mask indexed by leaf.
    n_target : int or None
        Size of the target set; ``mask.sum()`` when None.

    Returns
    -------
    int    Node ID of the MRCA.
    None   If the masked leaves do not form a clade (or the mask is empty).

    Complexity
    ----------
    O(n_nodes) per call.
    """
    if n_target is None:
        n_target = int(np.count_nonzero(mask))
    if n_target == 0:
        return None

    n_matched = np.zeros(tree.n_nodes, dtype=np.int64)
    n_leaves = np.zeros(tree.n_nodes, dtype=np.int64)
    left_child = tree.left_child
    right_child = tree.right_child

    for node in tree.postorder():
        lc = int(left_child[node])
        if lc == -1:
            n_leaves[node] = 1
            n_matched[node] = 1 if mask[node] else 0
        else:
            n_leaves[node] = n_leaves[lc]
            n_matched[node] = n_matched[lc]
            rc = int(right_child[node])
            if rc != -1:
                n_leaves[node] += n_leaves[rc]
                n_matched[node] += n_matched[rc]

        if n_matched[node] == n_target and n_leaves[node] == n_target:
            return int(node)

    return None


class MRCALocator:
    """
    Holds the membership mask of a taxon subset and re-locates its MRCA on
    demand, since the tree topology can change between calls.
    """

    def __init__(self, taxon_names: Sequence[str], subset_names: Sequence[str]) -> None:
        self.subset_names = list(subset_names)
        self.mask = taxon_mask(taxon_names, self.subset_names)
        self.n_target: int = len(self.subset_names)

    def locate(self, tree) -> Optional[int]:
        return find_mrca(tree, self.mask, self.n_target)

    def __repr__(self) -> str:
        return f"MRCALocator(n_target={self.n_target}, n_taxa={self.mask.shape[0]})"
