"""GeneratedSubclassLeaked: a generated subclass is referenced outside the unit declaring its base."""

from bugscope.domain.constants import DEFAULT_GENERATED_PREFIX, DEFAULT_MARKER_ANNOTATION
from bugscope.domain.matchers import ANYTHING, Matcher
from bugscope.domain.resolution import ResolutionContext
from bugscope.domain.rules import Diagnostic, Rule, Severity, VisitorState
from bugscope.domain.traversal import TraversalState
from bugscope.domain.tree import (
    TYPE_SYMBOL_KINDS,
    Node,
    NodeKind,
    TypeRef,
    iter_nodes,
)


class GeneratedSubclassLeakedRule(Rule):
    """
    Unit-level rule.

    Collects the types declared in this unit that carry the marker
    annotation, then reports every reference to a class whose name starts
    with the generated prefix and which does not descend from one of them.
    Generated declarations themselves are skipped by the scanner.
    """

    rule_id: str = "GeneratedSubclassLeaked"
    version: str = "1.0"
    severity: Severity = Severity.WARNING
    node_kinds: frozenset[NodeKind] = frozenset({NodeKind.COMPILATION_UNIT})
    matcher: Matcher = ANYTHING

    def __init__(
        self,
        marker_annotation: str = DEFAULT_MARKER_ANNOTATION,
        generated_prefix: str = DEFAULT_GENERATED_PREFIX,
    ) -> None:
        self.marker_annotation = marker_annotation
        self.generated_prefix = generated_prefix
        self.summary = (
            f"Do not refer to the generated {generated_prefix} class outside the file "
            f"containing the corresponding @{marker_annotation} base class."
        )

    def describe(self, node: Node, state: VisitorState) -> Diagnostic | None:
        owned = self.find_marked_types(node, state.ctx)

        def handle(reference: Node, _: TraversalState) -> None:
            if self.is_leaked_reference(reference, owned, state.ctx):
                state.report_match(state.describe_match(reference))

        state.scan(node, {NodeKind.IDENTIFIER: [handle], NodeKind.MEMBER_ACCESS: [handle]})
        return None

    def find_marked_types(self, root: Node, ctx: ResolutionContext) -> frozenset[TypeRef]:
        """Types of class declarations in this unit carrying the marker annotation."""
        found: set[TypeRef] = set()
        for candidate in iter_nodes(root):
            if candidate.kind is not NodeKind.CLASS:
                continue
            if not ctx.has_annotation(candidate, self.marker_annotation):
                continue
            declared = ctx.type_of(candidate)
            if declared is not None:
                found.add(declared)
        return frozenset(found)

    def is_leaked_reference(
        self, reference: Node, owned: frozenset[TypeRef], ctx: ResolutionContext
    ) -> bool:
        symbol = ctx.symbol_of(reference)
        if symbol is None or symbol.kind not in TYPE_SYMBOL_KINDS:
            return False
        if not symbol.name.startswith(self.generated_prefix):
            return False
        referenced = symbol.type or ctx.type_of(reference)
        return not any(ctx.is_subtype(referenced, base) for base in owned)
