"""Build a directed dependency graph over the resource changes of a plan."""

import networkx as nx
from typing import Dict, List, Sequence
from ..ingest.models import ResourceChangeInput
from ..ingest.plan_normalizer import strip_indices
from ..utils.logging import get_logger

logger = get_logger("graph.dependency_graph")


class DependencyGraph:
    """Directed dependency graph: nodes=resource addresses, edges=resource -> dependency."""

    def __init__(self):
        self.graph = nx.DiGraph()
        self._by_base_address: Dict[str, List[str]] = {}

    def add_resource(self, resource: ResourceChangeInput) -> None:
        """Add a resource node. Edges are resolved by build_from_resources."""
        self.graph.add_node(resource.address, resource_type=resource.resource_type)
        self._by_base_address.setdefault(strip_indices(resource.address), []).append(resource.address)

    def _resolve(self, dep_address: str) -> List[str]:
        """Node addresses for a dependency (exact, or every instance of an unindexed address)."""
        if dep_address in self.graph:
            return [dep_address]
        return self._by_base_address.get(strip_indices(dep_address), [])

    def build_from_resources(self, resources: Sequence[ResourceChangeInput]) -> None:
        """Build the complete graph from a list of resource changes."""
        for resource in resources:
            self.add_resource(resource)

        for resource in resources:
            for dep_address in resource.depends_on:
                targets = self._resolve(dep_address)
                if not targets:
                    logger.debug(f"Dependency not found in plan: {resource.address} -> {dep_address}")
                for target in targets:
                    if target != resource.address:
                        self.graph.add_edge(resource.address, target)

        logger.debug(
            f"Built dependency graph with {self.graph.number_of_nodes()} nodes "
            f"and {self.graph.number_of_edges()} edges"
        )

    def depends_on(self, address: str) -> List[str]:
        """Direct dependencies of a resource, sorted."""
        if address not in self.graph:
            return []
        return sorted(self.graph.successors(address))

    def used_by(self, address: str) -> List[str]:
        """Resources that directly depend on the given resource, sorted."""
        if address not in self.graph:
            return []
        return sorted(self.graph.predecessors(address))

