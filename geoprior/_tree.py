"""
_tree.py
========
A rooted phylogenetic tree stored as parallel numpy arrays, exposing the
narrow interface the geographic prior needs: leaf / internal test, left and
right child access, stable integer node indices and taxon-name lookup.

Public API
----------
  Tree(newick_string)
      Constructor.  Parses the NEWICK string.

  .is_leaf(node)
  .get_left(node), .get_right(node)
  .taxon_names
  .leaf_index(name)
  .postorder()
  .leaves_under(node)
  .is_ancestor(u, v)
  .exchange(u, v)
  .to_newick()

Node-ID conventions
-------------------
  Leaves   : 0 … n_leaves-1       (left-to-right in the NEWICK string)
  Internal : n_leaves … n_nodes-1 (post-order of creation)

The parsed root is the last node, but ``exchange`` and future topology
moves never renumber nodes, so callers read ``self.root`` rather than
assuming ``n_nodes - 1``.

Child arrays use ``-1`` for "no child".  A node may have a left child and
no right child (NEWICK ``(A)``); multifurcations are resolved into a
cascade of zero-length bifurcations.
"""

import numpy as np

from geoprior._logging import log_multifurcation_warning

_DELIMITERS = ",():;"
_WHITESPACE = " \t\n\r"


class Tree:
    """
    A rooted, binary (or unary-degenerate) phylogenetic tree.

    Attributes
    ----------
    n_nodes   : int          Total number of nodes.
    n_leaves  : int          Number of leaf (taxon) nodes.
    root      : int          Node ID of the root.
    names     : list[str]    Label of each node; '' when unlabelled.

    Arrays
    ------
    parent      : int32  [n_nodes]   Parent ID; -1 for root.
    left_child  : int32  [n_nodes]   Left child ID; -1 for leaves.
    right_child : int32  [n_nodes]   Right child ID; -1 for leaves / unary nodes.
    distance    : float64[n_nodes]   Branch length to parent; -1.0 when absent.
    support     : float64[n_nodes]   Numeric internal label; -1.0 when absent.
    """

    # ================================================================== #
    # Construction                                                         #
    # ================================================================== #

    def __init__(self, newick_string: str) -> None:
        """
        Parameters
        ----------
        newick_string : str
            A NEWICK-formatted tree string (trailing ';' optional).

        Raises
        ------
        ValueError   if the string is empty or malformed.
        """
        self._parse_newick(newick_string)
        self.n_nodes: int = int(self.parent.shape[0])

        # Name index: built lazily on first name-based query.
        self._name_index: dict = None  # type: ignore[assignment]

    # ================================================================== #
    # Structure queries                                                    #
    # ================================================================== #

    def is_leaf(self, node: int) -> bool:
        return int(self.left_child[node]) == -1

    def get_left(self, node: int) -> int:
        return int(self.left_child[node])

    def get_right(self, node: int) -> int:
        return int(self.right_child[node])

    @property
    def taxon_names(self) -> list:
        """Leaf names ordered by leaf index."""
        return self.names[: self.n_leaves]

    def leaf_index(self, name: str) -> int:
        """
        Return the leaf index of taxon *name*.

        Raises
        ------
        KeyError   if no leaf carries *name*.
        """
        if self._name_index is None:
            self._build_name_index()
        if name not in self._name_index:
            raise KeyError(f"No taxon with name '{name}' found in tree.")
        return self._name_index[name]

    def postorder(self) -> list:
        """
        Return all node IDs reachable from the root in post-order (left
        subtree, right subtree, node).  Iterative; no recursion limit.
        """
        left_child = self.left_child
        right_child = self.right_child
        order = []
        stack = [(self.root, False)]
        while stack:
            node, expanded = stack.pop()
            lc = int(left_child[node])
            if expanded or lc == -1:
                order.append(node)
                continue
            stack.append((node, True))
            rc = int(right_child[node])
            if rc != -1:
                stack.append((rc, False))
            stack.append((lc, False))
        return order

    def leaves_under(self, node: int) -> list:
        """Return the sorted leaf IDs of the subtree rooted at *node*."""
        leaves = []
        stack = [node]
        while stack:
            n = stack.pop()
            lc = int(self.left_child[n])
            if lc == -1:
                leaves.append(n)
                continue
            stack.append(lc)
            rc = int(self.right_child[n])
            if rc != -1:
                stack.append(rc)
        return sorted(leaves)

    def is_ancestor(self, u: int, v: int) -> bool:
        """Return True if *u* is a proper ancestor of *v*."""
        p = int(self.parent[v])
        while p != -1:
            if p == u:
                return True
            p = int(self.parent[p])
        return False

    # ================================================================== #
    # Topology moves                                                       #
    # ================================================================== #

    def exchange(self, u: int, v: int) -> None:
        """
        Swap the subtrees rooted at *u* and *v* between their parents.

        Node IDs are preserved; only ``parent``, ``left_child`` and
        ``right_child`` change.  Swapping two siblings only flips their
        left/right order.

        Raises
        ------
        ValueError   if u == v, either node is the root, or one subtree
                     contains the other.
        """
        if u == v:
            raise ValueError(f"Cannot exchange node {u} with itself.")
        if u == self.root or v == self.root:
            raise ValueError("Cannot exchange the root.")
        if self.is_ancestor(u, v) or self.is_ancestor(v, u):
            raise ValueError(
                f"Cannot exchange nested subtrees rooted at {u} and {v}."
            )

        pu = int(self.parent[u])
        pv = int(self.parent[v])
        if pu == pv:
            self.left_child[pu], self.right_child[pu] = (
                self.right_child[pu],
                self.left_child[pu],
            )
            return

        self._replace_child(pu, u, v)
        self._replace_child(pv, v, u)
        self.parent[u] = pv
        self.parent[v] = pu

    def to_newick(self) -> str:
        """
        Serialize the current topology to NEWICK (labels, numeric supports
        and branch lengths where present).
        """
        text = {}
        for node in self.postorder():
            lc = int(self.left_child[node])
            if lc == -1:
                label = self.names[node]
            else:
                rc = int(self.right_child[node])
                inner = text.pop(lc)
                if rc != -1:
                    inner += "," + text.pop(rc)
                label = f"({inner})"
                if self.names[node]:
                    label += self.names[node]
                elif self.support[node] >= 0.0:
                    label += f"{self.support[node]:g}"
            if self.distance[node] >= 0.0:
                label += f":{self.distance[node]:g}"
            text[node] = label
        return text[self.root] + ";"

    def __repr__(self) -> str:
        return f"Tree(n_leaves={self.n_leaves}, n_nodes={self.n_nodes})"

    # ================================================================== #
    # Private instance methods                                             #
    # ================================================================== #

    def _replace_child(self, node: int, old: int, new: int) -> None:
        if int(self.left_child[node]) == old:
            self.left_child[node] = new
        else:
            self.right_child[node] = new

    def _parse_newick(self, newick_string: str) -> None:
        """
        **Private.**  Parse *newick_string* and populate the tree-structure
        arrays as instance attributes.

        Two-pass algorithm
        ------------------
        Pass 1  Count commas → n_leaves (commas separate siblings, so a
                rooted tree always has one more leaf than commas).
        Pass 2  Iterative, stack-based scan.  Leaves receive IDs in order of
                appearance; each ')' closes a group and creates the internal
                node(s) for it.

        Populates
        ---------
        self.names, self.parent, self.left_child, self.right_child,
        self.distance, self.support, self.n_leaves, self.root
        """
        s = newick_string.strip()
        if s.endswith(";"):
            s = s[:-1].rstrip()
        if not s:
            raise ValueError("Empty NEWICK string.")

        n_leaves = s.count(",") + 1

        names = [""] * n_leaves
        left_child = [-1] * n_leaves
        right_child = [-1] * n_leaves
        distance = [-1.0] * n_leaves
        support = [-1.0] * n_leaves

        def new_internal(left: int, right: int) -> int:
            names.append("")
            left_child.append(left)
            right_child.append(right)
            distance.append(-1.0)
            support.append(-1.0)
            return len(names) - 1

        OPEN_PAREN = -2
        stack = []
        leaf_id = 0
        n_extra = 0
        n_chars = len(s)
        i = 0
        while i < n_chars:
            c = s[i]

            if c in _WHITESPACE or c == ",":
                i += 1
                continue

            if c == "(":
                stack.append(OPEN_PAREN)
                i += 1
                continue

            if c == ")":
                i += 1
                children = []
                while stack and stack[-1] != OPEN_PAREN:
                    children.append(stack.pop())
                if not stack:
                    raise ValueError(f"Unbalanced ')' at position {i - 1}.")
                stack.pop()
                if not children:
                    raise ValueError(f"Empty group '()' at position {i - 2}.")
                children.reverse()

                if len(children) == 1:
                    node_id = new_internal(children[0], -1)
                else:
                    node_id = new_internal(children[0], children[1])
                    for child in children[2:]:
                        distance[node_id] = 0.0
                        node_id = new_internal(node_id, child)
                    n_extra += len(children) - 2

                label, i = Tree._read_label(s, i)
                if label:
                    try:
                        support[node_id] = float(label)
                    except ValueError:
                        names[node_id] = label
                length, i = Tree._read_length(s, i)
                if length is not None:
                    distance[node_id] = length
                stack.append(node_id)
                continue

            # Leaf
            label, j = Tree._read_label(s, i)
            if not label and (j >= n_chars or s[j] != ":"):
                raise ValueError(f"Unexpected character {c!r} at position {i}.")
            if leaf_id >= n_leaves:
                raise ValueError("More leaves than separators; malformed NEWICK.")
            node_id = leaf_id
            leaf_id += 1
            names[node_id] = label
            length, i = Tree._read_length(s, j)
            if length is not None:
                distance[node_id] = length
            stack.append(node_id)

        if len(stack) != 1 or stack[0] == OPEN_PAREN:
            raise ValueError("Unbalanced parentheses in NEWICK string.")
        if leaf_id != n_leaves:
            raise ValueError(
                f"Expected {n_leaves} leaves from separators, found {leaf_id}."
            )
        if n_extra > 0:
            log_multifurcation_warning(n_extra, n_leaves)

        n_nodes = len(names)
        left = np.array(left_child, dtype=np.int32)
        right = np.array(right_child, dtype=np.int32)
        parent = np.full(n_nodes, -1, dtype=np.int32)
        for node_id in range(n_leaves, n_nodes):
            parent[left[node_id]] = node_id
            if right[node_id] != -1:
                parent[right[node_id]] = node_id

        self.names = names
        self.parent = parent
        self.left_child = left
        self.right_child = right
        self.distance = np.array(distance, dtype=np.float64)
        self.support = np.array(support, dtype=np.float64)
        self.n_leaves: int = n_leaves
        self.root: int = int(stack[0])

    def _build_name_index(self) -> None:
        """
        **Private.**  Build and cache ``self._name_index``: a dict mapping
        each non-empty leaf name to its leaf index.

        Raises
        ------
        ValueError   if duplicate taxon names are found.
        """
        idx = {}
        for node_id in range(self.n_leaves):
            name = self.names[node_id]
            if name != "":
                if name in idx:
                    raise ValueError(
                        f"Duplicate taxon name '{name}' at IDs "
                        f"{idx[name]} and {node_id}."
                    )
                idx[name] = node_id
        self._name_index = idx

    # ================================================================== #
    # Private static methods                                               #
    # ================================================================== #

    @staticmethod
    def _read_label(s: str, i: int):
        """**Private static.**  Read a label starting at *i*; return (label, next_i)."""
        n_chars = len(s)
        while i < n_chars and s[i] in " \t":
            i += 1
        j = i
        while j < n_chars and s[j] not in _DELIMITERS and s[j] not in _WHITESPACE:
            j += 1
        label = s[i:j]
        while j < n_chars and s[j] in " \t":
            j += 1
        return label, j

    @staticmethod
    def _read_length(s: str, i: int):
        """
        **Private static.**  If ``s[i]`` is ':', read the branch length that
        follows; return (length or None, next_i).
        """
        n_chars = len(s)
        if i >= n_chars or s[i] != ":":
            return None, i
        token, j = Tree._read_label(s, i + 1)
        try:
            return float(token), j
        except ValueError:
            raise ValueError(f"Invalid branch length {token!r} at position {i + 1}.")
