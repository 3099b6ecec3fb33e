"""Resolved tree model: nodes, symbols, types and compilation units. Read-only inputs to the core."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum


class BugscopeError(Exception):
    """Base class for all errors raised by bugscope."""


class NoSourceSpan(BugscopeError):
    """Raised when a node has no textual origin (synthetic or generated code)."""

    def __init__(self, node: "Node") -> None:
        super().__init__(f"{node.kind.value} node has no source span")
        self.node = node


class NodeKind(Enum):
    """Closed set of node kinds the front end may produce."""
    COMPILATION_UNIT = "compilation_unit"
    CLASS = "class"
    METHOD = "method"
    VARIABLE = "variable"
    BLOCK = "block"
    IDENTIFIER = "identifier"
    MEMBER_ACCESS = "member_access"
    INVOCATION = "invocation"
    BINARY = "binary"
    UNARY = "unary"
    LITERAL = "literal"
    ASSIGNMENT = "assignment"
    RETURN = "return"
    EXPRESSION_STATEMENT = "expression_statement"
    OTHER = "other"


CONTAINER_KINDS: frozenset[NodeKind] = frozenset({NodeKind.CLASS, NodeKind.METHOD})
DECLARATION_KINDS: frozenset[NodeKind] = frozenset(
    {NodeKind.CLASS, NodeKind.METHOD, NodeKind.VARIABLE}
)


class SymbolKind(Enum):
    """Kind of declared entity a Symbol denotes."""
    PACKAGE = "package"
    MODULE = "module"
    CLASS = "class"
    INTERFACE = "interface"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    FIELD = "field"
    VARIABLE = "variable"
    PARAMETER = "parameter"


TYPE_SYMBOL_KINDS: frozenset[SymbolKind] = frozenset({SymbolKind.CLASS, SymbolKind.INTERFACE})
METHOD_SYMBOL_KINDS: frozenset[SymbolKind] = frozenset({SymbolKind.METHOD, SymbolKind.CONSTRUCTOR})


@dataclass(frozen=True)
class Span:
    """Half-open [start, end) character range into a unit's source text."""
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid span [{self.start}, {self.end})")

    @property
    def is_empty(self) -> bool:
        """True for zero-width spans (insertion points)."""
        return self.start == self.end

    def overlaps(self, other: "Span") -> bool:
        """True if the two ranges share at least one offset."""
        return self.start < other.end and other.start < self.end

    def contains(self, other: "Span") -> bool:
        return self.start <= other.start and other.end <= self.end


@dataclass(frozen=True)
class Annotation:
    """A marker attached to a declaration, e.g. AutoValue or SuppressWarnings("X")."""
    name: str
    arguments: tuple[str, ...] = ()

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def matches(self, name: str) -> bool:
        """True if name is this annotation's qualified or simple name."""
        return name in (self.name, self.simple_name)


@dataclass(frozen=True)
class TypeRef:
    """
    Identity of a declared or inferred type.

    Identity is the qualified name plus type arguments. Direct supertypes
    (superclass and implemented interfaces) are carried for subtype queries
    but do not participate in equality.
    """
    qualified_name: str
    type_arguments: tuple["TypeRef", ...] = ()
    supertypes: tuple["TypeRef", ...] = field(default=(), compare=False, repr=False)

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rsplit(".", 1)[-1]

    @property
    def erasure(self) -> str:
        return self.qualified_name

    def __str__(self) -> str:
        if not self.type_arguments:
            return self.qualified_name
        args = ", ".join(str(a) for a in self.type_arguments)
        return f"{self.qualified_name}<{args}>"


@dataclass(frozen=True)
class Symbol:
    """
    Stable identity of a declared entity.

    Two symbols are equal iff they denote the same declaration: same name,
    kind, owner chain and parameter list. Type, provenance and annotations
    are attributes of the declaration, not part of its identity.
    """
    name: str
    kind: SymbolKind
    owner: "Symbol | None" = None
    parameters: tuple[str, ...] = ()
    is_static: bool = False
    type: TypeRef | None = field(default=None, compare=False, repr=False)
    generated_by: frozenset[str] = field(default=frozenset(), compare=False, repr=False)
    annotations: tuple[Annotation, ...] = field(default=(), compare=False, repr=False)

    @property
    def qualified_name(self) -> str:
        if self.owner is None:
            return self.name
        return f"{self.owner.qualified_name}.{self.name}"

    def enclosing_class(self) -> "Symbol | None":
        """Nearest owner (or self) that is a class or interface."""
        current: Symbol | None = self
        while current is not None:
            if current.kind in TYPE_SYMBOL_KINDS:
                return current
            current = current.owner
        return None


@dataclass(frozen=True, eq=False)
class Node:
    """
    One element of the resolved tree. Immutable; compared by identity.

    Child roles depend on kind: INVOCATION is (method_select, *arguments),
    MEMBER_ACCESS is (receiver,), BINARY is (left, right).
    """
    kind: NodeKind
    children: tuple["Node", ...] = ()
    symbol: Symbol | None = None
    type: TypeRef | None = None
    span: Span | None = None
    name: str | None = None
    operator: str | None = None
    annotations: tuple[Annotation, ...] = ()

    @property
    def is_container(self) -> bool:
        return self.kind in CONTAINER_KINDS

    def child(self, index: int) -> "Node | None":
        """Child at index, or None when the node has fewer children."""
        if 0 <= index < len(self.children):
            return self.children[index]
        return None


@dataclass(frozen=True, eq=False)
class CompilationUnit:
    """Root container: one tree, one source buffer."""
    path: str
    source: str
    tree: Node

    def __post_init__(self) -> None:
        if self.tree.kind is not NodeKind.COMPILATION_UNIT:
            raise ValueError(f"Unit root must be a compilation unit, got {self.tree.kind.value}")

    def declarations(self) -> tuple[Node, ...]:
        """Top-level declared entities."""
        return tuple(c for c in self.tree.children if c.kind in DECLARATION_KINDS)


def iter_nodes(root: Node) -> Iterator[Node]:
    """Pre-order walk of a subtree, without suppression."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def get_symbol(node: Node | None) -> Symbol | None:
    return node.symbol if node is not None else None


def get_type(node: Node | None) -> TypeRef | None:
    """Resolved type of a node, falling back to its symbol's declared type."""
    if node is None:
        return None
    if node.type is not None:
        return node.type
    return node.symbol.type if node.symbol is not None else None


def get_method_select(invocation: Node) -> Node | None:
    if invocation.kind is not NodeKind.INVOCATION:
        return None
    return invocation.child(0)


def get_arguments(invocation: Node) -> tuple[Node, ...]:
    if invocation.kind is not NodeKind.INVOCATION:
        return ()
    return invocation.children[1:]


def get_receiver(node: Node) -> Node | None:
    """
    Receiver expression of an invocation or member access.

    Returns None for implicit receivers, e.g. ``nextInt()`` called on ``this``.
    """
    if node.kind is NodeKind.INVOCATION:
        select = get_method_select(node)
        return get_receiver(select) if select is not None else None
    if node.kind is NodeKind.MEMBER_ACCESS:
        return node.child(0)
    return None
