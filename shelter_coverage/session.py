#!/usr/bin/env python3
"""
Shelter Coverage Analysis - Draw Session

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Own the per-session draw state that the map frontend drives.

- Datasets are loaded once and never mutated during analysis
- At most one query shape is active; a new draw replaces the previous one
- Created / edited events rerun the full analysis from scratch
- Deleted (or "clear analysis") resets to the cleared result
- Shape and result are swapped together under one lock

The session is an explicit object handed to whoever handles draw events,
so there is no ambient global draw state.

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
import threading
from typing import Any, Iterable, List, Optional, Sequence

from shelter_coverage.aggregator import AnalysisResult, analyze
from shelter_coverage.containment import ContainmentStrategy, get_strategy
from shelter_coverage.coordinates import CoordinateNormalizer, get_default_normalizer
from shelter_coverage.shapes import QueryShape

logger = logging.getLogger(__name__)


class DrawSession:
    """Single current shape plus the live analysis result for one user session."""

    def __init__(
        self,
        population_areas: Optional[Sequence[Any]] = None,
        shelter_sites: Optional[Sequence[Any]] = None,
        normalizer: Optional[CoordinateNormalizer] = None,
        strategy: Optional[ContainmentStrategy] = None,
    ) -> None:
        self.population_areas: Sequence[Any] = tuple(population_areas or ())
        self.shelter_sites: Sequence[Any] = tuple(shelter_sites or ())
        self.normalizer = normalizer or get_default_normalizer()
        self.strategy = strategy or get_strategy()

        self.current_shape: Optional[QueryShape] = None
        self.result: AnalysisResult = AnalysisResult.cleared()
        # Shape and result change together; request threads share one session
        self._lock = threading.RLock()

    def analyze(self, shape: QueryShape) -> AnalysisResult:
        """Make shape the current shape and recompute the live result."""
        with self._lock:
            result = analyze(
                shape,
                self.population_areas,
                self.shelter_sites,
                normalizer=self.normalizer,
                strategy=self.strategy,
            )
            self.current_shape = shape
            self.result = result
            return result

    def on_created(self, shape: QueryShape) -> AnalysisResult:
        """A new shape was drawn; any previous shape is discarded."""
        if self.current_shape is not None:
            logger.info("Replacing previously drawn shape")
        return self.analyze(shape)

    def on_edited(self, shapes: Iterable[QueryShape]) -> AnalysisResult:
        """
        One or more shapes were edited.

        Each edited shape is analysed in turn; the last one stays current.
        """
        edited: List[QueryShape] = list(shapes)
        with self._lock:
            for shape in edited:
                self.analyze(shape)
            return self.result

    def on_deleted(self) -> AnalysisResult:
        """The shape was deleted from the map."""
        return self.clear()

    def clear(self) -> AnalysisResult:
        """Drop the current shape and reset to the cleared result."""
        with self._lock:
            self.current_shape = None
            self.result = AnalysisResult.cleared()
            logger.info("Analysis cleared")
            return self.result
