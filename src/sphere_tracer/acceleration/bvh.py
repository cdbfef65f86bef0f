"""Bounding-volume hierarchy over surface bounding boxes.

The tree is built once in NumPy and flattened into ``BVHArrays``: node 0 is
the root, every internal node has exactly two children and every leaf holds
one primitive, so a tree over n primitives has 2n - 1 nodes.

Traversal runs inside Numba with an explicit stack supplied by the caller,
so concurrent traversals never share scratch space.
"""

from collections import namedtuple

import numpy as np
from numba import njit

from ..geometry.aabb import AABB, aabb_hit, inverse_direction
from ..geometry.surfaces import surface_hit_distance

BVHArrays = namedtuple(
    "BVHArrays", ["box_min", "box_max", "left", "right", "primitive", "axis"]
)


@njit(cache=True, nogil=True)
def bvh_closest_hit(nodes, surfaces, origin, direction, time, t_min, t_max, stack):
    """Nearest surface hit strictly inside (t_min, t_max).

    Args:
        nodes: Flattened tree (``BVHArrays``)
        surfaces: Packed surface table (``SurfaceArrays``)
        origin: Ray origin
        direction: Ray direction
        time: Ray time
        t_min: Lower bound on the ray parameter
        t_max: Upper bound on the ray parameter
        stack: int64 scratch buffer of at least ``BVH.stack_size`` entries

    Returns:
        (index, t); index is -1 and t is t_max when nothing was hit
    """
    hit_index = -1
    closest = t_max
    if nodes.left.shape[0] == 0:
        return hit_index, closest

    inv_dir = inverse_direction(direction)
    stack[0] = 0
    top = 1

    while top > 0:
        top -= 1
        node = stack[top]
        if not aabb_hit(nodes.box_min[node], nodes.box_max[node], origin, inv_dir, t_min, closest):
            continue

        prim = nodes.primitive[node]
        if prim >= 0:
            found, t = surface_hit_distance(surfaces, prim, origin, direction, time, t_min, closest)
            if found:
                hit_index = prim
                closest = t
            continue

        # Push the far child first so the near child is visited next
        if direction[nodes.axis[node]] < 0.0:
            stack[top] = nodes.left[node]
            stack[top + 1] = nodes.right[node]
        else:
            stack[top] = nodes.right[node]
            stack[top + 1] = nodes.left[node]
        top += 2

    return hit_index, closest


class BVH:
    """Median-split BVH built from per-primitive bounding boxes.

    Args:
        box_min: (n, 3) lower box corners, one row per primitive
        box_max: (n, 3) upper box corners

    Example:
        >>> bvh = BVH(box_min, box_max)
        >>> stack = bvh.new_stack()
        >>> index, t = bvh_closest_hit(bvh.arrays, surfaces, origin, direction,
        ...                            0.0, 0.001, np.inf, stack)
    """

    def __init__(self, box_min: np.ndarray, box_max: np.ndarray):
        box_min = np.asarray(box_min, dtype=np.float64).reshape(-1, 3)
        box_max = np.asarray(box_max, dtype=np.float64).reshape(-1, 3)
        if box_min.shape != box_max.shape:
            raise ValueError(
                f"box_min and box_max must have the same shape, "
                f"got {box_min.shape} and {box_max.shape}"
            )
        if np.any(box_min > box_max):
            raise ValueError("box_min must not exceed box_max")

        self._num_primitives = box_min.shape[0]
        self._depth = 0
        self._arrays = self._build(box_min, box_max)

    def _build(self, box_min: np.ndarray, box_max: np.ndarray) -> BVHArrays:
        n = self._num_primitives
        node_count = max(2 * n - 1, 0)

        node_min = np.zeros((node_count, 3), dtype=np.float64)
        node_max = np.zeros((node_count, 3), dtype=np.float64)
        left = np.full(node_count, -1, dtype=np.int64)
        right = np.full(node_count, -1, dtype=np.int64)
        primitive = np.full(node_count, -1, dtype=np.int64)
        axis = np.zeros(node_count, dtype=np.int64)

        if n > 0:
            centroids = 0.5 * (box_min + box_max)
            work = [(0, np.arange(n), 0)]
            next_node = 1

            while work:
                node, indices, level = work.pop()
                self._depth = max(self._depth, level)
                node_min[node] = box_min[indices].min(axis=0)
                node_max[node] = box_max[indices].max(axis=0)

                if len(indices) == 1:
                    primitive[node] = indices[0]
                    continue

                # Split on the axis of largest centroid spread
                c = centroids[indices]
                split_axis = int(np.argmax(c.max(axis=0) - c.min(axis=0)))
                mid = len(indices) // 2
                order = np.argpartition(c[:, split_axis], mid)

                left[node] = next_node
                right[node] = next_node + 1
                axis[node] = split_axis
                next_node += 2

                work.append((right[node], indices[order[mid:]], level + 1))
                work.append((left[node], indices[order[:mid]], level + 1))

        arrays = BVHArrays(node_min, node_max, left, right, primitive, axis)
        for arr in arrays:
            arr.flags.writeable = False
        return arrays

    @property
    def arrays(self) -> BVHArrays:
        return self._arrays

    @property
    def node_count(self) -> int:
        return self._arrays.left.shape[0]

    @property
    def num_primitives(self) -> int:
        return self._num_primitives

    @property
    def depth(self) -> int:
        """Length of the longest root-to-leaf path (0 for a single leaf)."""
        return self._depth

    @property
    def stack_size(self) -> int:
        return 2 * self._depth + 2

    def new_stack(self) -> np.ndarray:
        """Fresh traversal buffer; give each thread its own."""
        return np.empty(self.stack_size, dtype=np.int64)

    def bounding_box(self):
        """Box around every primitive, or None for an empty tree."""
        if self.node_count == 0:
            return None
        return AABB(self._arrays.box_min[0], self._arrays.box_max[0])
