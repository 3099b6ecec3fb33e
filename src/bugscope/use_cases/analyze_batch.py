"""Use case: analyze many compilation units in parallel, one traversal per worker."""

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from bugscope.domain.traversal import CancellationToken
from bugscope.domain.tree import CompilationUnit
from bugscope.use_cases.analyze_unit import AnalyzeUnitUseCase, UnitReport

logger = logging.getLogger(__name__)


class AnalyzeBatchUseCase:
    """
    Fan units out over a thread pool.

    Units share only read-only input and the frozen rule set, so the
    per-unit reports equal those of a sequential run; they are returned in
    input order.
    """

    def __init__(self, analyze_unit: AnalyzeUnitUseCase, max_workers: int = 4) -> None:
        self.analyze_unit = analyze_unit
        self.max_workers = max(1, max_workers)

    def execute(
        self,
        units: Sequence[CompilationUnit],
        token: CancellationToken | None = None,
    ) -> list[UnitReport]:
        if not units:
            return []
        if self.max_workers == 1 or len(units) == 1:
            return [self.analyze_unit.execute(unit, token) for unit in units]
        workers = min(self.max_workers, len(units))
        logger.debug("Analyzing %d unit(s) on %d worker(s)", len(units), workers)
        with ThreadPoolExecutor(max_workers=workers) as ex:
            futures = [ex.submit(self.analyze_unit.execute, unit, token) for unit in units]
            return [f.result() for f in futures]
