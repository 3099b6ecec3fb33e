"""Use case: run every registered rule over one compilation unit."""

import dataclasses
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from bugscope.domain.constants import INTERNAL_RULE_ID
from bugscope.domain.resolution import ProvenanceQuery, ResolutionContext
from bugscope.domain.rules import Diagnostic, RegisteredRules, Rule, Severity, VisitorState
from bugscope.domain.spans import SpanMapper
from bugscope.domain.traversal import (
    DEFAULT_SUPPRESSIONS,
    CancellationToken,
    Handler,
    SuppressionPredicate,
    TraversalCancelled,
    TraversalState,
    TreeScanner,
)
from bugscope.domain.tree import CompilationUnit, Node, NodeKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnitReport:
    """Diagnostics for one unit, ordered by source position."""
    path: str
    diagnostics: tuple[Diagnostic, ...] = ()
    cancelled: bool = False

    @property
    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self.diagnostics)

    def by_rule(self, rule_id: str) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.rule_id == rule_id)


@dataclass(frozen=True)
class _UnitScope:
    """Per-unit lookups shared by every rule invocation of one traversal."""
    unit: CompilationUnit
    ctx: ResolutionContext
    spans: SpanMapper


class AnalyzeUnitUseCase:
    """
    Rule dispatch for a single compilation unit.

    Each unit gets its own ResolutionContext, SpanMapper and traversal
    state; nothing is kept between calls, so one instance may serve many
    threads. A failing rule yields an internal RuleFailure diagnostic and
    the walk continues. A cancelled walk returns no diagnostics at all.
    """

    def __init__(
        self,
        rules: RegisteredRules,
        suppressions: Sequence[SuppressionPredicate] = DEFAULT_SUPPRESSIONS,
        provenance: ProvenanceQuery | None = None,
    ) -> None:
        self.rules = rules
        self.suppressions = tuple(suppressions)
        self.provenance = provenance

    def execute(self, unit: CompilationUnit, token: CancellationToken | None = None) -> UnitReport:
        scope = _UnitScope(unit, ResolutionContext(unit, self.provenance), SpanMapper(unit))
        collected: list[Diagnostic] = []

        def dispatch(node: Node, traversal: TraversalState) -> None:
            for rule in self.rules.for_kind(node.kind):
                if not traversal.is_suppressed(rule.rule_id):
                    collected.extend(self._run_rule(rule, node, scope, traversal))

        handlers: dict[NodeKind, list[Handler]] = {kind: [dispatch] for kind in self.rules.by_kind}
        try:
            TreeScanner(scope.ctx, handlers, self.suppressions).scan(unit.tree, TraversalState(token))
        except TraversalCancelled:
            logger.info("Analysis of %s cancelled; discarding %d diagnostic(s)", unit.path, len(collected))
            return UnitReport(path=unit.path, cancelled=True)
        ordered = sorted(collected, key=Diagnostic.sort_key)
        return UnitReport(path=unit.path, diagnostics=tuple(ordered))

    def _run_rule(
        self, rule: Rule, node: Node, scope: _UnitScope, traversal: TraversalState
    ) -> list[Diagnostic]:
        """Evaluate one rule at one node; its diagnostics are kept only if it completes."""
        sink: list[Diagnostic] = []
        state = VisitorState(
            rule, scope.unit, scope.ctx, scope.spans, traversal, self.suppressions, sink
        )
        try:
            if not rule.matcher.matches(node, scope.ctx):
                return []
            diagnostic = rule.describe(node, state)
        except TraversalCancelled:
            raise
        except Exception as exc:
            logger.warning(
                "Rule %s failed on %s node in %s", rule.rule_id, node.kind.value, scope.unit.path,
                exc_info=True,
            )
            return [self._rule_failure(rule, node, exc, scope, traversal)]
        if diagnostic is not None:
            sink.append(diagnostic)
        return [self._checked_fix(d) for d in sink]

    def _checked_fix(self, diagnostic: Diagnostic) -> Diagnostic:
        if diagnostic.fix is None or diagnostic.fix.is_well_formed:
            return diagnostic
        logger.warning("Dropping malformed fix from %s at %s", diagnostic.rule_id, diagnostic.location)
        return dataclasses.replace(diagnostic, fix=None)

    def _rule_failure(
        self,
        rule: Rule,
        node: Node,
        exc: Exception,
        scope: _UnitScope,
        traversal: TraversalState,
    ) -> Diagnostic:
        span = scope.spans.enclosing_span(node, traversal.ancestors)
        line, col = scope.spans.line_col(span.start) if span is not None else (0, 0)
        return Diagnostic(
            rule_id=INTERNAL_RULE_ID,
            severity=Severity.WARNING,
            span=span,
            message=f"Rule {rule.rule_id} failed on {node.kind.value} node: {type(exc).__name__}: {exc}",
            location=f"{scope.unit.path}:{line}:{col}",
        )
