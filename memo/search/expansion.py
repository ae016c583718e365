"""
Multi-layer expansion search.

Starting from the query vector, each layer re-queries the vector store
from the stored vector of every memory accepted in the previous layer:

    query ──> layer 1 (threshold t1)
                ├─> branch A ──> layer 2 (threshold t2 > t1)
                └─> branch B ──> layer 2 ...

Layers are processed as an explicit frontier. All branches of a layer
run concurrently, then their candidates are merged into the aggregator
in branch submission order before the next layer starts.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import CollaboratorError, SearchError
from ..memory.base import QueryResult, TimeRange, VectorStore
from .aggregator import CandidateAggregator
from .models import MemoryNode, MemoryTree, SearchConfig

logger = logging.getLogger("memo.search.expansion")


@dataclass
class ExpansionResult:
    """Outcome of one expansion search."""
    aggregator: CandidateAggregator
    thresholds: list[float]
    layers_completed: int

    @property
    def is_empty(self) -> bool:
        return self.aggregator.count == 0

    def flat(self) -> list[QueryResult]:
        return self.aggregator.flat()

    def tree(self) -> MemoryTree:
        return self.aggregator.tree()


class ExpansionEngine:
    """
    Grows a bounded neighborhood of related memories around a seed vector.

    Stops when the node budget is reached, the thresholds run out, or a
    layer accepts nothing new. A branch whose store call raises
    CollaboratorError is logged and counts as empty; it never aborts the
    search. Any other exception propagates.
    """

    def __init__(self, vector_store: VectorStore, config: Optional[SearchConfig] = None):
        self.vector_store = vector_store
        self.config = config or SearchConfig()

    async def expand(
        self,
        seed_vector: list[float],
        time_range: Optional[TimeRange] = None,
    ) -> ExpansionResult:
        """
        Run the expansion from seed_vector.

        Args:
            seed_vector: Embedding of the query text
            time_range: Optional bounds applied to every store call

        Returns:
            ExpansionResult; empty (not an error) when layer 1 finds nothing

        Raises:
            ConfigError: If the search config is invalid
            SearchError: If the layer-1 store call fails
        """
        self.config.validate()
        thresholds = self.config.generate_thresholds()
        aggregator = CandidateAggregator(max_nodes=self.config.max_nodes)

        logger.debug(
            f"Expanding with thresholds={thresholds}, max_nodes={self.config.max_nodes}, "
            f"branch_limit={self.config.branch_limit}"
        )

        try:
            first_layer = await self.vector_store.search_by_vector(
                seed_vector,
                limit=self.config.branch_limit,
                min_score=thresholds[0],
                time_range=time_range,
            )
        except CollaboratorError as e:
            raise SearchError("expansion", str(e)) from e

        frontier = []
        for result in first_layer[:self.config.branch_limit]:
            node = aggregator.accept(result, parent=None, layer=1)
            if node is not None:
                frontier.append(node)

        if not frontier:
            logger.info(f"No results found above threshold {thresholds[0]:.2f}")
            return ExpansionResult(aggregator=aggregator, thresholds=thresholds, layers_completed=0)

        logger.info(f"Layer 1: {len(frontier)} memories above {thresholds[0]:.2f}")
        layers_completed = 1

        for layer, threshold in enumerate(thresholds[1:], start=2):
            if aggregator.is_full:
                logger.info(f"Node budget of {self.config.max_nodes} reached")
                break

            branches = await asyncio.gather(
                *(self._explore_branch(node, threshold, time_range) for node in frontier)
            )
            frontier = self._merge_layer(aggregator, frontier, branches, layer)

            if not frontier:
                logger.info(f"Layer {layer}: no new memories above {threshold:.2f}, stopping")
                break

            layers_completed = layer
            logger.info(f"Layer {layer}: {len(frontier)} new memories above {threshold:.2f}")

        logger.info(
            f"Expansion finished: {aggregator.count} memories across {layers_completed} layers"
        )
        return ExpansionResult(
            aggregator=aggregator,
            thresholds=thresholds,
            layers_completed=layers_completed,
        )

    async def _explore_branch(
        self,
        node: MemoryNode,
        threshold: float,
        time_range: Optional[TimeRange],
    ) -> list[QueryResult]:
        """
        Search from one accepted memory's own vector.

        Returns the branch's candidates after tag filtering and truncation
        to branch_limit. Does not touch the aggregator.
        """
        memory_id = node.memory.id

        try:
            memory = await self.vector_store.find_memory_by_id(memory_id)
            if memory is None:
                logger.debug(f"Memory {memory_id} not found, leaving it as a leaf")
                return []

            candidates = await self.vector_store.search_by_vector(
                memory.vector,
                limit=self.config.branch_limit * 2,
                min_score=threshold,
                time_range=time_range,
            )
        except CollaboratorError as e:
            logger.warning(f"Branch from {memory_id} failed, treating as empty: {e}")
            return []

        if self.config.require_tag_overlap:
            candidates = [c for c in candidates if memory.shares_tag_with(c.tags)]

        return candidates[:self.config.branch_limit]

    def _merge_layer(
        self,
        aggregator: CandidateAggregator,
        parents: list[MemoryNode],
        branches: list[list[QueryResult]],
        layer: int,
    ) -> list[MemoryNode]:
        """Accept one layer's branch results in submission order; return the new frontier."""
        new_frontier = []

        for parent, candidates in zip(parents, branches):
            for candidate in candidates:
                if aggregator.is_full:
                    return new_frontier
                node = aggregator.accept(candidate, parent=parent, layer=layer)
                if node is not None:
                    new_frontier.append(node)

        return new_frontier
