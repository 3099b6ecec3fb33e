"""
Suppression-aware depth-first traversal.

The scanner walks a tree in pre-order with an explicit, per-traversal state
(scope stack, ancestor path, rule suppressions). At every subtree entry the
suppression predicates decide whether the subtree is skipped entirely
(generated code) or whether some rules are disabled inside it
(SuppressWarnings-style markers). Handlers are looked up in a table indexed
by node kind, so new rules never change the walk itself.
"""

import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from bugscope.domain.resolution import ResolutionContext
from bugscope.domain.tree import (
    DECLARATION_KINDS,
    BugscopeError,
    Node,
    NodeKind,
    Symbol,
)

logger = logging.getLogger(__name__)


class TraversalCancelled(BugscopeError):
    """Raised inside a traversal once its cancellation token is set."""


class CancellationToken:
    """Thread-safe flag the driver sets to abandon a unit."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise TraversalCancelled("Traversal cancelled")


@dataclass(frozen=True)
class Suppression:
    """Outcome of a suppression predicate for one subtree."""
    everything: bool = False
    rule_ids: frozenset[str] = frozenset()

    @property
    def is_active(self) -> bool:
        return self.everything or bool(self.rule_ids)

    def combine(self, other: "Suppression") -> "Suppression":
        return Suppression(
            everything=self.everything or other.everything,
            rule_ids=self.rule_ids | other.rule_ids,
        )


NO_SUPPRESSION = Suppression()
SUPPRESS_ALL = Suppression(everything=True)

SuppressionPredicate = Callable[[Node, ResolutionContext], Suppression]


def generated_code(node: Node, ctx: ResolutionContext) -> Suppression:
    """Skip declarations whose symbol was produced by a generation mechanism."""
    if node.kind in DECLARATION_KINDS and ctx.is_generated(node.symbol):
        return SUPPRESS_ALL
    return NO_SUPPRESSION


def suppress_warnings(annotation: str = "SuppressWarnings") -> SuppressionPredicate:
    """Disable the rule ids listed in a suppression annotation on a declaration."""

    def predicate(node: Node, ctx: ResolutionContext) -> Suppression:
        if node.kind not in DECLARATION_KINDS:
            return NO_SUPPRESSION
        rule_ids: set[str] = set()
        for found in ctx.annotations_of(node):
            if found.matches(annotation):
                rule_ids.update(found.arguments)
        if not rule_ids:
            return NO_SUPPRESSION
        return Suppression(rule_ids=frozenset(rule_ids))

    return predicate


DEFAULT_SUPPRESSIONS: tuple[SuppressionPredicate, ...] = (
    generated_code,
    suppress_warnings(),
)


@dataclass(frozen=True)
class ScopeFrame:
    """One entered container (class, method)."""
    node: Node
    symbol: Symbol | None


class TraversalState:
    """
    Mutable state private to one traversal.

    ``path`` holds the ancestors of the node being visited with the node
    itself last; ``scopes`` holds the entered containers, innermost last.
    """

    def __init__(self, token: CancellationToken | None = None) -> None:
        self.path: list[Node] = []
        self.scopes: list[ScopeFrame] = []
        self.suppressed_rules: frozenset[str] = frozenset()
        self.token = token or CancellationToken()

    @property
    def current(self) -> Node | None:
        return self.path[-1] if self.path else None

    @property
    def ancestors(self) -> tuple[Node, ...]:
        return tuple(self.path[:-1])

    @property
    def current_scope(self) -> ScopeFrame | None:
        return self.scopes[-1] if self.scopes else None

    def enclosing(self, kind: NodeKind) -> ScopeFrame | None:
        for frame in reversed(self.scopes):
            if frame.node.kind is kind:
                return frame
        return None

    def is_suppressed(self, rule_id: str) -> bool:
        return rule_id in self.suppressed_rules

    def enter(self, node: Node, suppression: Suppression) -> frozenset[str]:
        """Push node; return the suppression set to restore on exit."""
        saved = self.suppressed_rules
        self.path.append(node)
        if node.is_container:
            self.scopes.append(ScopeFrame(node=node, symbol=node.symbol))
        if suppression.rule_ids:
            self.suppressed_rules = saved | suppression.rule_ids
        return saved

    def leave(self, node: Node, saved: frozenset[str]) -> None:
        popped = self.path.pop()
        if popped is not node:
            raise RuntimeError("Traversal path out of balance")
        if node.is_container:
            self.scopes.pop()
        self.suppressed_rules = saved


Handler = Callable[[Node, TraversalState], None]

_ENTER = "enter"
_EXIT = "exit"


class TreeScanner:
    """Pre-order scanner dispatching to kind-indexed handlers, honouring suppressions."""

    def __init__(
        self,
        ctx: ResolutionContext,
        handlers: Mapping[NodeKind, Sequence[Handler]],
        suppressions: Sequence[SuppressionPredicate] = DEFAULT_SUPPRESSIONS,
    ) -> None:
        self._ctx = ctx
        self._handlers = handlers
        self._suppressions = tuple(suppressions)

    def suppression_for(self, node: Node) -> Suppression:
        result = NO_SUPPRESSION
        for predicate in self._suppressions:
            result = result.combine(predicate(node, self._ctx))
            if result.everything:
                break
        return result

    def scan(self, root: Node, state: TraversalState | None = None) -> TraversalState:
        """Walk root's subtree; returns the (balanced) state when the walk completes."""
        state = state or TraversalState()
        depth = len(state.path)
        stack: list[tuple[str, Node, frozenset[str]]] = [(_ENTER, root, frozenset())]
        while stack:
            action, node, saved = stack.pop()
            if action == _EXIT:
                state.leave(node, saved)
                continue
            state.token.raise_if_cancelled()
            suppression = self.suppression_for(node)
            if suppression.everything:
                logger.debug("Skipping generated %s subtree %s", node.kind.value, node.name or "")
                continue
            restore = state.enter(node, suppression)
            for handler in self._handlers.get(node.kind, ()):
                handler(node, state)
            stack.append((_EXIT, node, restore))
            for child in reversed(node.children):
                stack.append((_ENTER, child, frozenset()))
        if len(state.path) != depth:
            raise RuntimeError("Traversal finished with unbalanced scopes")
        return state
