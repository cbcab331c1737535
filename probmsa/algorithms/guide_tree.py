"""Guide tree construction by average linkage and tree-derived sequence weights."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from scipy.cluster.hierarchy import linkage, to_tree
from scipy.spatial.distance import squareform

from probmsa.constants import INT_MULTIPLY


@dataclass
class TreeNode:
    """Node of a binary guide tree.

    Leaves carry the index of their sequence; internal nodes carry two
    children and the height at which they were merged.
    """

    index: int
    left: Optional["TreeNode"] = None
    right: Optional["TreeNode"] = None
    height: float = 0.0

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def leaves(self) -> List[int]:
        """Sequence indices under this node, left to right."""
        if self.is_leaf:
            return [self.index]
        return self.left.leaves() + self.right.leaves()


class GuideTree:
    """Binary tree over sequence indices used to order profile merges."""

    def __init__(self, root: TreeNode, num_sequences: int) -> None:
        self.root = root
        self.num_sequences = num_sequences

    @classmethod
    def from_distances(cls, distances: np.ndarray) -> "GuideTree":
        """Build the tree by average linkage (UPGMA) over a distance matrix."""
        distances = np.asarray(distances, dtype=float)
        if distances.ndim != 2 or distances.shape[0] != distances.shape[1]:
            raise ValueError(f"Distance matrix must be square, got {distances.shape}")
        num_seqs = distances.shape[0]
        if num_seqs == 0:
            raise ValueError("Cannot build a guide tree without sequences.")
        if num_seqs == 1:
            return cls(TreeNode(index=0), 1)

        symmetric = (distances + distances.T) / 2.0
        np.fill_diagonal(symmetric, 0.0)
        condensed = squareform(np.clip(symmetric, 0.0, None), checks=False)
        scipy_root = to_tree(linkage(condensed, method="average"))
        return cls(_convert(scipy_root), num_seqs)

    def internal_nodes(self) -> List[TreeNode]:
        """Internal nodes in post-order (children before parents)."""
        nodes: List[TreeNode] = []

        def _walk(node: TreeNode) -> None:
            if node.is_leaf:
                return
            _walk(node.left)
            _walk(node.right)
            nodes.append(node)

        _walk(self.root)
        return nodes

    def alignment_orders(self) -> List[Tuple[List[int], List[int]]]:
        """Leaf lists of the left and right subtrees of every internal node."""
        return [(node.left.leaves(), node.right.leaves()) for node in self.internal_nodes()]

    def sequence_weights(self) -> np.ndarray:
        """Integer per-sequence weights from branch lengths.

        Each branch length is shared equally by the leaves below it; a leaf's
        weight is the sum of its shares along the path to the root. Weights
        are normalized to mean 1 and scaled by ``INT_MULTIPLY``.
        """
        raw = np.zeros(self.num_sequences, dtype=float)

        def _walk(node: TreeNode, parent_height: float) -> None:
            leaves = node.leaves()
            share = max(parent_height - node.height, 0.0) / len(leaves)
            raw[leaves] += share
            if not node.is_leaf:
                _walk(node.left, node.height)
                _walk(node.right, node.height)

        if not self.root.is_leaf:
            _walk(self.root.left, self.root.height)
            _walk(self.root.right, self.root.height)

        if raw.sum() <= 0:
            return np.full(self.num_sequences, INT_MULTIPLY, dtype=int)
        normalized = raw * (self.num_sequences / raw.sum())
        return np.maximum(np.rint(normalized * INT_MULTIPLY), 1).astype(int)

    def __repr__(self) -> str:
        def _newick(node: TreeNode) -> str:
            if node.is_leaf:
                return str(node.index)
            return f"({_newick(node.left)},{_newick(node.right)})"

        return f"GuideTree({_newick(self.root)})"


def _convert(node) -> TreeNode:
    """Copy a scipy ClusterNode into TreeNode, halving merge distances."""
    if node.is_leaf():
        return TreeNode(index=node.get_id())
    return TreeNode(
        index=node.get_id(),
        left=_convert(node.get_left()),
        right=_convert(node.get_right()),
        height=node.dist / 2.0,
    )


__all__ = ["TreeNode", "GuideTree"]
