"""Road network graph for the ACO simulation."""

import logging
import numpy as np
from typing import Tuple, List, Dict, Iterable, Optional
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import minimum_spanning_tree, connected_components
from scipy.spatial.distance import pdist, squareform

logger = logging.getLogger(__name__)

EdgeKey = Tuple[int, int]


def edge_key(i: int, j: int) -> EdgeKey:
    """Canonical key of the undirected edge between i and j."""
    return (i, j) if i <= j else (j, i)


class GraphModel:
    """
    Static node set and undirected edge set of the road network.

    Nodes are rows of an (N, 2) coordinate array. Edges are stored as
    canonical (min, max) pairs in insertion order: spanning edges first,
    then any required edges not already present.
    """

    def __init__(self, nodes, required_edges: Iterable[Tuple[int, int]] = (),
                 node_classes: Optional[Dict[int, str]] = None):
        self.nodes = self._validate_nodes(nodes)
        self.node_count = len(self.nodes)
        self.node_classes = dict(node_classes or {})
        self.distances = squareform(pdist(self.nodes))

        self.edges: List[EdgeKey] = self.build(required_edges)
        self._edge_set = set(self.edges)

        # Neighbor tuples, in edge order
        neighbors: Dict[int, List[int]] = {i: [] for i in range(self.node_count)}
        for i, j in self.edges:
            neighbors[i].append(j)
            neighbors[j].append(i)
        self.adjacency: Dict[int, Tuple[int, ...]] = {
            i: tuple(ns) for i, ns in neighbors.items()
        }

        # Index arrays for vectorized pheromone updates
        self.edge_rows = np.array([i for i, _ in self.edges], dtype=np.intp)
        self.edge_cols = np.array([j for _, j in self.edges], dtype=np.intp)

        logger.info("Graph built: %d nodes, %d edges",
                    self.node_count, len(self.edges))

    @staticmethod
    def _validate_nodes(nodes) -> np.ndarray:
        coords = np.asarray(nodes, dtype=np.float64)
        if coords.ndim != 2 or coords.shape[1] != 2:
            raise ValueError(f"Node coordinates must have shape (N, 2), got {coords.shape}")
        if len(coords) < 2:
            raise ValueError("A road network needs at least two nodes")
        if not np.all(np.isfinite(coords)):
            raise ValueError("Node coordinates must be finite")
        if np.any(pdist(coords) == 0):
            raise ValueError("Node coordinates must be distinct")
        return coords

    def _spanning_edges(self) -> List[EdgeKey]:
        """Euclidean minimum spanning tree over the complete graph."""
        tree = minimum_spanning_tree(csr_matrix(self.distances)).tocoo()
        edges = [edge_key(int(i), int(j)) for i, j in zip(tree.row, tree.col)]
        return sorted(edges)

    def build(self, required_edges: Iterable[Tuple[int, int]]) -> List[EdgeKey]:
        """
        Guarantee connectivity, then merge in curated required edges.

        Pairs already present (as unordered pairs) are skipped, so the
        result has no duplicate undirected edges.
        """
        edges = self._spanning_edges()
        present = set(edges)
        for i, j in required_edges:
            if not (self.has_node(i) and self.has_node(j)):
                raise ValueError(f"Required edge ({i}, {j}) references an unknown node")
            if i == j:
                raise ValueError(f"Required edge ({i}, {j}) is a self-loop")
            key = edge_key(i, j)
            if key not in present:
                present.add(key)
                edges.append(key)

        self._check_connected(edges)
        return edges

    def _check_connected(self, edges: List[EdgeKey]) -> None:
        rows = [i for i, _ in edges]
        cols = [j for _, j in edges]
        adjacency = csr_matrix((np.ones(len(edges)), (rows, cols)),
                               shape=(self.node_count, self.node_count))
        n_components, _ = connected_components(adjacency, directed=False)
        if n_components != 1:
            raise ValueError(f"Road network has {n_components} disconnected parts")

    def has_node(self, i) -> bool:
        """Check if i is a valid node index."""
        return isinstance(i, (int, np.integer)) and 0 <= i < self.node_count

    def has_edge(self, i: int, j: int) -> bool:
        return edge_key(i, j) in self._edge_set

    def neighbors(self, i: int) -> Tuple[int, ...]:
        """Nodes directly connected to i by any edge."""
        return self.adjacency.get(i, ())

    def distance(self, i: int, j: int) -> float:
        return float(self.distances[i, j])

    def position(self, i: int) -> Tuple[float, float]:
        x, y = self.nodes[i]
        return float(x), float(y)
