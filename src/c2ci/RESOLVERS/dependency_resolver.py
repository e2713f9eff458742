# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Dependency resolution for services to determine boot order.
"""
import logging
from collections import deque
from typing import List, Dict
from pydantic import BaseModel, ConfigDict
from ..MODELS.compose_document import ComposeDocument

logger = logging.getLogger(__name__)


class DependencyGraph(BaseModel):
    """
    Directed graph of services. Edges point from a dependency to its dependents.
    """
    model_config = ConfigDict(frozen=True)

    nodes: List[str]
    edges: Dict[str, List[str]]

    def dependents_of(self, name: str) -> List[str]:
        return list(self.edges.get(name, []))

    def in_degrees(self) -> Dict[str, int]:
        degrees = {name: 0 for name in self.nodes}
        for dependents in self.edges.values():
            for dependent in dependents:
                degrees[dependent] += 1
        return degrees


class OrderResult(BaseModel):
    """
    A boot sequence. ``has_cycle`` marks a best-effort ordering.
    """
    model_config = ConfigDict(frozen=True)

    sequence: List[str]
    has_cycle: bool = False


class DependencyResolver:
    """
    Resolves the boot order of services based on their ``depends_on`` declarations.
    """
    def build_graph(self, document: ComposeDocument) -> DependencyGraph:
        """
        Builds the dependency graph of a document.
        References to services that are not declared are ignored.

        :param document: The compose document.
        :return: The graph, with nodes in document order.
        """
        nodes = document.service_names
        edges: Dict[str, List[str]] = {name: [] for name in nodes}
        for name, service in document.services.items():
            for dep in service.depends_on:
                if dep in edges:
                    edges[dep].append(name)
                else:
                    logger.debug("Service %s depends on undeclared service %s, ignoring", name, dep)
        return DependencyGraph(nodes=nodes, edges=edges)

    def resolve_order(self, document: ComposeDocument) -> OrderResult:
        """
        Orders services so that dependencies come before their dependents (Kahn's algorithm).

        Ties are broken by the order in which services become free, which is
        stable but not alphabetical. If a cycle exists, the services left over
        are appended in document order instead of failing.

        :param document: The compose document.
        :return: The sequence and whether a cycle was found.
        """
        graph = self.build_graph(document)
        in_degree = graph.in_degrees()

        queue = deque(name for name in graph.nodes if in_degree[name] == 0)
        sequence: List[str] = []
        while queue:
            name = queue.popleft()
            sequence.append(name)
            for dependent in graph.dependents_of(name):
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        has_cycle = len(sequence) < len(graph.nodes)
        if has_cycle:
            emitted = set(sequence)
            remaining = [name for name in graph.nodes if name not in emitted]
            logger.debug("Circular dependency among %s", ", ".join(remaining))
            sequence.extend(remaining)

        return OrderResult(sequence=sequence, has_cycle=has_cycle)
