"""Domain models for rules and diagnostics, and the per-match visitor state handed to rules."""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Protocol

from bugscope.domain.fixes import Fix, OverlappingEditsError, SuggestedFix
from bugscope.domain.matchers import Matcher
from bugscope.domain.resolution import ResolutionContext
from bugscope.domain.spans import SpanMapper
from bugscope.domain.traversal import (
    Handler,
    SuppressionPredicate,
    TraversalState,
    TreeScanner,
)
from bugscope.domain.tree import (
    BugscopeError,
    CompilationUnit,
    NoSourceSpan,
    Node,
    NodeKind,
    Span,
)

__all__ = [
    "Diagnostic",
    "RegisteredRules",
    "RegistryFrozenError",
    "Rule",
    "RuleRegistry",
    "Severity",
    "VisitorState",
]

logger = logging.getLogger(__name__)


class Severity(Enum):
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Diagnostic:
    """One finding: rule id, severity, target span, message and an optional fix."""

    rule_id: str
    severity: Severity
    span: Span | None
    message: str
    fix: Fix | None = None
    location: str = ""
    """path:line:col of the span start, for reporting."""

    @property
    def has_fix(self) -> bool:
        return self.fix is not None and not self.fix.is_empty

    def sort_key(self) -> tuple[int, int, str]:
        if self.span is None:
            return (-1, -1, self.rule_id)
        return (self.span.start, self.span.end, self.rule_id)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for reporters."""
        return {
            "rule_id": self.rule_id,
            "severity": self.severity.value,
            "location": self.location,
            "span": [self.span.start, self.span.end] if self.span else None,
            "message": self.message,
            "fix": self.fix.as_triples() if self.fix else None,
        }


# -----------------------------------------------------------------------------
# Rule protocol. A rule names the node kinds it fires on, a matcher that must
# hold before it is consulted, and describe(), which builds zero or one
# Diagnostic. Rules hold configuration only; per-unit state lives in locals.
# -----------------------------------------------------------------------------


class Rule(Protocol):
    """A named, versioned matcher + diagnostic builder."""

    rule_id: str
    version: str
    severity: Severity
    summary: str
    node_kinds: frozenset[NodeKind]
    matcher: Matcher

    def describe(self, node: Node, state: "VisitorState") -> Diagnostic | None:
        """Build a diagnostic for a matched node, or None to decline."""
        ...


FixFactory = Callable[[SuggestedFix], SuggestedFix | Fix]


class VisitorState:
    """What a rule sees while handling one match: unit, lookups, spans and reporting."""

    def __init__(
        self,
        rule: Rule,
        unit: CompilationUnit,
        ctx: ResolutionContext,
        spans: SpanMapper,
        traversal: TraversalState,
        suppressions: Sequence[SuppressionPredicate],
        sink: list[Diagnostic],
    ) -> None:
        self.rule = rule
        self.unit = unit
        self.ctx = ctx
        self.spans = spans
        self.traversal = traversal
        self._suppressions = suppressions
        self._sink = sink

    def source_for(self, node: Node) -> str:
        return self.spans.source_for(node)

    def fix_builder(self) -> SuggestedFix:
        return SuggestedFix(self.spans)

    def describe_match(
        self,
        node: Node,
        message: str | None = None,
        fix: FixFactory | Fix | None = None,
    ) -> Diagnostic:
        """
        Diagnostic for node using the rule's id, severity and summary.

        A fix factory that fails (span-less target, conflicting edits) drops
        the fix; the diagnostic is still returned.
        """
        path = self.traversal.ancestors if self.traversal.current is node else tuple(self.traversal.path)
        span = self.spans.enclosing_span(node, path)
        return Diagnostic(
            rule_id=self.rule.rule_id,
            severity=self.rule.severity,
            span=span,
            message=message or self.rule.summary,
            fix=self._build_fix(node, fix),
            location=self._location(span),
        )

    def report_match(self, diagnostic: Diagnostic) -> None:
        """Report an additional diagnostic (for unit-level rules scanning on their own)."""
        self._sink.append(diagnostic)

    def scan(self, root: Node, handlers: Mapping[NodeKind, Sequence[Handler]]) -> None:
        """Run a nested suppression-aware scan that honours this rule's suppressions."""
        rule_id = self.rule.rule_id

        def guard(handler: Handler) -> Handler:
            def guarded(node: Node, inner: TraversalState) -> None:
                if inner.is_suppressed(rule_id):
                    return
                previous = self.traversal
                self.traversal = inner
                try:
                    handler(node, inner)
                finally:
                    self.traversal = previous
            return guarded

        table = {kind: [guard(h) for h in hs] for kind, hs in handlers.items()}
        inner = TraversalState(token=self.traversal.token)
        inner.suppressed_rules = self.traversal.suppressed_rules
        TreeScanner(self.ctx, table, self._suppressions).scan(root, inner)

    def _build_fix(self, node: Node, fix: FixFactory | Fix | None) -> Fix | None:
        if fix is None or isinstance(fix, Fix):
            return fix
        try:
            built = fix(self.fix_builder())
            return built.build() if isinstance(built, SuggestedFix) else built
        except (NoSourceSpan, OverlappingEditsError) as exc:
            logger.warning("Dropping fix for %s at %s: %s", self.rule.rule_id, node.kind.value, exc)
            return None

    def _location(self, span: Span | None) -> str:
        if span is None:
            return f"{self.unit.path}:0:0"
        line, col = self.spans.line_col(span.start)
        return f"{self.unit.path}:{line}:{col}"


class RegistryFrozenError(BugscopeError):
    """Raised when registering a rule after the registry was frozen."""


@dataclass(frozen=True)
class RegisteredRules:
    """Immutable, kind-indexed view of the registered rules."""

    rules: tuple[Rule, ...]
    by_kind: Mapping[NodeKind, tuple[Rule, ...]]

    def for_kind(self, kind: NodeKind) -> tuple[Rule, ...]:
        return self.by_kind.get(kind, ())

    def get(self, rule_id: str) -> Rule | None:
        for rule in self.rules:
            if rule.rule_id == rule_id:
                return rule
        return None

    @property
    def rule_ids(self) -> tuple[str, ...]:
        return tuple(r.rule_id for r in self.rules)


class RuleRegistry:
    """Collects rules once at start-up; freeze() hands out the immutable view."""

    def __init__(self) -> None:
        self._rules: list[Rule] = []
        self._frozen: RegisteredRules | None = None

    def register(self, rule: Rule) -> "RuleRegistry":
        if self._frozen is not None:
            raise RegistryFrozenError(f"Cannot register {rule.rule_id}: registry is frozen")
        if not rule.node_kinds:
            raise ValueError(f"Rule {rule.rule_id} declares no node kinds")
        if any(r.rule_id == rule.rule_id for r in self._rules):
            raise ValueError(f"Duplicate rule id: {rule.rule_id}")
        self._rules.append(rule)
        return self

    def freeze(self) -> RegisteredRules:
        if self._frozen is None:
            index: dict[NodeKind, list[Rule]] = {}
            for rule in self._rules:
                for kind in rule.node_kinds:
                    index.setdefault(kind, []).append(rule)
            self._frozen = RegisteredRules(
                rules=tuple(self._rules),
                by_kind=MappingProxyType({k: tuple(v) for k, v in index.items()}),
            )
        return self._frozen
