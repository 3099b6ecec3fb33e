"""RandomModInteger: ``rng.nextInt() % n`` is biased and can be negative; use ``rng.nextInt(n)``."""

from bugscope.domain.constants import DEFAULT_RANDOM_METHOD, DEFAULT_RANDOM_TYPE
from bugscope.domain.fixes import SuggestedFix
from bugscope.domain.matchers import (
    BinaryOperator,
    LeftOperand,
    Matcher,
    MethodInvocation,
    instance_method,
)
from bugscope.domain.rules import Diagnostic, Rule, Severity, VisitorState
from bugscope.domain.tree import Node, NodeKind, get_method_select, get_receiver

# Spans exclude grouping parentheses; other receivers need them back.
_PRIMARY_KINDS = frozenset(
    {NodeKind.IDENTIFIER, NodeKind.MEMBER_ACCESS, NodeKind.INVOCATION, NodeKind.LITERAL}
)

class RandomModIntegerRule(Rule):
    """Flags a remainder whose left operand is an unbounded draw from a random generator."""

    rule_id: str = "RandomModInteger"
    version: str = "1.0"
    severity: Severity = Severity.ERROR
    node_kinds: frozenset[NodeKind] = frozenset({NodeKind.BINARY})

    def __init__(
        self,
        random_type: str = DEFAULT_RANDOM_TYPE,
        method_name: str = DEFAULT_RANDOM_METHOD,
    ) -> None:
        self.random_type = random_type
        self.method_name = method_name
        self.summary = (
            f"Use {method_name}(int). {method_name}() % n can have negative results"
        )
        self.next_int: MethodInvocation = (
            instance_method().on_descendant_of(random_type).named(method_name).with_no_arguments()
        )
        self.matcher: Matcher = BinaryOperator("%") & LeftOperand(self.next_int)

    def describe(self, node: Node, state: VisitorState) -> Diagnostic | None:
        invocation = node.child(0)
        modulus = node.child(1)
        if invocation is None or modulus is None:
            return None
        receiver = get_receiver(invocation)
        select = get_method_select(invocation)
        method = (select.name if select is not None else None) or self.method_name

        def rewrite(fix: SuggestedFix) -> SuggestedFix:
            call = f"{method}({state.source_for(modulus)})"
            if receiver is not None:
                call = f"{self.receiver_text(receiver, state)}.{call}"
            return fix.replace(node, call)

        return state.describe_match(node, fix=rewrite)

    def receiver_text(self, receiver: Node, state: VisitorState) -> str:
        """Receiver source, parenthesized unless it already binds tighter than a member access."""
        text = state.source_for(receiver)
        if receiver.kind in _PRIMARY_KINDS:
            return text
        return f"({text})"
