"""Use case: analyze files and write the suggested fixes back to disk."""

import logging
from dataclasses import dataclass, field

from bugscope.domain.fixes import Fix
from bugscope.domain.protocols import FixerGatewayProtocol, FrontEndError, FrontEndProtocol
from bugscope.use_cases.analyze_unit import AnalyzeUnitUseCase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixSummary:
    """Outcome of a fix run."""
    modified_files: list[str] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)
    fixes_offered: int = 0


class ApplyFixesUseCase:
    """Analyze each file once and apply every fix its diagnostics carry."""

    def __init__(
        self,
        front_end: FrontEndProtocol,
        analyze_unit: AnalyzeUnitUseCase,
        fixer_gateway: FixerGatewayProtocol,
    ) -> None:
        self.front_end = front_end
        self.analyze_unit = analyze_unit
        self.fixer_gateway = fixer_gateway

    def execute(self, file_paths: list[str]) -> FixSummary:
        modified: list[str] = []
        skipped: list[str] = []
        offered = 0
        for file_path in file_paths:
            try:
                unit = self.front_end.parse_file(file_path)
            except FrontEndError as exc:
                logger.warning("Skipping %s: %s", file_path, exc)
                skipped.append(file_path)
                continue
            report = self.analyze_unit.execute(unit)
            fixes: list[Fix] = [d.fix for d in report.diagnostics if d.fix is not None and d.has_fix]
            if not fixes:
                continue
            offered += len(fixes)
            if self.fixer_gateway.apply_fixes(file_path, fixes, expected_source=unit.source):
                modified.append(file_path)
        return FixSummary(modified_files=modified, skipped_files=skipped, fixes_offered=offered)
