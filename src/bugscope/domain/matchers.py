"""
Matcher algebra: composable, side-effect free predicates over (Node, ResolutionContext).

Every matcher is a frozen value with ``matches(node, ctx)`` and ``describe()``.
Primitives filter on kind, symbol and structure; AllOf/AnyOf/Not (or the
``&``, ``|`` and ``~`` operators) combine them. A matcher evaluated against a
node of the wrong kind, or against a node whose symbol or type did not
resolve, returns False.
"""

import dataclasses
from dataclasses import dataclass

from bugscope.domain.resolution import ResolutionContext
from bugscope.domain.tree import (
    METHOD_SYMBOL_KINDS,
    Node,
    NodeKind,
    Symbol,
    SymbolKind,
    get_arguments,
    get_method_select,
    get_receiver,
    get_type,
)


class Matcher:
    """Base of the matcher algebra."""

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def __and__(self, other: "Matcher") -> "Matcher":
        return AllOf((self, other))

    def __or__(self, other: "Matcher") -> "Matcher":
        return AnyOf((self, other))

    def __invert__(self) -> "Matcher":
        return Not(self)


@dataclass(frozen=True)
class Anything(Matcher):
    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        return True

    def describe(self) -> str:
        return "anything"


@dataclass(frozen=True)
class Nothing(Matcher):
    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        return False

    def describe(self) -> str:
        return "nothing"


ANYTHING = Anything()
NOTHING = Nothing()


@dataclass(frozen=True)
class AllOf(Matcher):
    """Matches when every operand matches (empty AllOf matches everything)."""
    operands: tuple[Matcher, ...]

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        return all(m.matches(node, ctx) for m in self.operands)

    def describe(self) -> str:
        return "(" + " and ".join(m.describe() for m in self.operands) + ")"

    def __and__(self, other: Matcher) -> Matcher:
        return AllOf(self.operands + (other,))


@dataclass(frozen=True)
class AnyOf(Matcher):
    """Matches when at least one operand matches."""
    operands: tuple[Matcher, ...]

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        return any(m.matches(node, ctx) for m in self.operands)

    def describe(self) -> str:
        return "(" + " or ".join(m.describe() for m in self.operands) + ")"

    def __or__(self, other: Matcher) -> Matcher:
        return AnyOf(self.operands + (other,))


@dataclass(frozen=True)
class Not(Matcher):
    operand: Matcher

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        return not self.operand.matches(node, ctx)

    def describe(self) -> str:
        return f"not {self.operand.describe()}"

    def __invert__(self) -> Matcher:
        return self.operand


@dataclass(frozen=True)
class KindIs(Matcher):
    kinds: frozenset[NodeKind]

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        return node.kind in self.kinds

    def describe(self) -> str:
        names = ", ".join(sorted(k.value for k in self.kinds))
        return f"kind in [{names}]"


@dataclass(frozen=True)
class BinaryOperator(Matcher):
    """A binary expression with the given operator, e.g. '%'."""
    operator: str

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        return node.kind is NodeKind.BINARY and node.operator == self.operator

    def describe(self) -> str:
        return f"binary '{self.operator}'"


@dataclass(frozen=True)
class SymbolNamed(Matcher):
    name: str

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        symbol = ctx.symbol_of(node)
        return symbol is not None and symbol.name == self.name

    def describe(self) -> str:
        return f"symbol named '{self.name}'"


@dataclass(frozen=True)
class SymbolKindIs(Matcher):
    kinds: frozenset[SymbolKind]

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        symbol = ctx.symbol_of(node)
        return symbol is not None and symbol.kind in self.kinds

    def describe(self) -> str:
        names = ", ".join(sorted(k.value for k in self.kinds))
        return f"symbol kind in [{names}]"


@dataclass(frozen=True)
class IsSubtypeOf(Matcher):
    """The node's resolved type is the named type or one of its descendants."""
    type_name: str

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        return ctx.is_subtype(ctx.type_of(node), self.type_name)

    def describe(self) -> str:
        return f"subtype of {self.type_name}"


@dataclass(frozen=True)
class HasAnnotation(Matcher):
    annotation: str

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        return ctx.has_annotation(node, self.annotation)

    def describe(self) -> str:
        return f"annotated @{self.annotation}"


@dataclass(frozen=True)
class LeftOperand(Matcher):
    operand: Matcher

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        left = node.child(0) if node.kind is NodeKind.BINARY else None
        return left is not None and self.operand.matches(left, ctx)

    def describe(self) -> str:
        return f"left operand {self.operand.describe()}"


@dataclass(frozen=True)
class RightOperand(Matcher):
    operand: Matcher

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        right = node.child(1) if node.kind is NodeKind.BINARY else None
        return right is not None and self.operand.matches(right, ctx)

    def describe(self) -> str:
        return f"right operand {self.operand.describe()}"


@dataclass(frozen=True)
class Receiver(Matcher):
    """The receiver of an invocation or member access matches operand."""
    operand: Matcher

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        receiver = get_receiver(node)
        return receiver is not None and self.operand.matches(receiver, ctx)

    def describe(self) -> str:
        return f"receiver {self.operand.describe()}"


@dataclass(frozen=True)
class AnyArgument(Matcher):
    operand: Matcher

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        return any(self.operand.matches(arg, ctx) for arg in get_arguments(node))

    def describe(self) -> str:
        return f"any argument {self.operand.describe()}"


@dataclass(frozen=True)
class MethodInvocation(Matcher):
    """
    An invocation of a method, narrowed fluently:

        instance_method().on_descendant_of("java.util.Random").named("nextInt").with_no_arguments()

    Parameter counts are read from the declaration; argument counts from the
    call site.
    """
    static: bool = False
    owner_type: str | None = None
    exact_owner: bool = False
    method_name: str | None = None
    parameter_count: int | None = None
    argument_count: int | None = None

    def on_descendant_of(self, type_name: str) -> "MethodInvocation":
        return dataclasses.replace(self, owner_type=type_name, exact_owner=False)

    def on_exact_class(self, type_name: str) -> "MethodInvocation":
        return dataclasses.replace(self, owner_type=type_name, exact_owner=True)

    def named(self, name: str) -> "MethodInvocation":
        return dataclasses.replace(self, method_name=name)

    def with_parameter_count(self, count: int) -> "MethodInvocation":
        return dataclasses.replace(self, parameter_count=count)

    def with_no_parameters(self) -> "MethodInvocation":
        return self.with_parameter_count(0)

    def with_argument_count(self, count: int) -> "MethodInvocation":
        return dataclasses.replace(self, argument_count=count)

    def with_no_arguments(self) -> "MethodInvocation":
        return self.with_argument_count(0)

    def matches(self, node: Node, ctx: ResolutionContext) -> bool:
        if node.kind is not NodeKind.INVOCATION:
            return False
        symbol = ctx.symbol_of(node) or ctx.symbol_of(get_method_select(node))
        if symbol is None or symbol.kind not in METHOD_SYMBOL_KINDS:
            return False
        if symbol.is_static != self.static:
            return False
        if self.method_name is not None and symbol.name != self.method_name:
            return False
        if self.parameter_count is not None and len(symbol.parameters) != self.parameter_count:
            return False
        if self.argument_count is not None and len(get_arguments(node)) != self.argument_count:
            return False
        if self.owner_type is not None and not self._owner_matches(node, symbol, ctx):
            return False
        return True

    def _owner_matches(self, node: Node, symbol: Symbol, ctx: ResolutionContext) -> bool:
        """Receiver type or declaring class is owner_type (or a descendant of it)."""
        declaring = symbol.enclosing_class()
        candidates = [get_type(get_receiver(node)), declaring.type if declaring else None]
        for candidate in candidates:
            if candidate is None:
                continue
            if self.exact_owner:
                if candidate.erasure == self.owner_type:
                    return True
            elif ctx.is_subtype(candidate, self.owner_type):
                return True
        return False

    def describe(self) -> str:
        parts = ["static method" if self.static else "instance method"]
        if self.owner_type is not None:
            relation = "on exact class" if self.exact_owner else "on descendant of"
            parts.append(f"{relation} {self.owner_type}")
        if self.method_name is not None:
            parts.append(f"named {self.method_name}")
        if self.parameter_count is not None:
            parts.append(f"with {self.parameter_count} parameter(s)")
        if self.argument_count is not None:
            parts.append(f"with {self.argument_count} argument(s)")
        return " ".join(parts)


def instance_method() -> MethodInvocation:
    return MethodInvocation(static=False)


def static_method() -> MethodInvocation:
    return MethodInvocation(static=True)


def kind_is(*kinds: NodeKind) -> KindIs:
    return KindIs(frozenset(kinds))


def symbol_kind_is(*kinds: SymbolKind) -> SymbolKindIs:
    return SymbolKindIs(frozenset(kinds))


def all_of(*matchers: Matcher) -> AllOf:
    return AllOf(tuple(matchers))


def any_of(*matchers: Matcher) -> AnyOf:
    return AnyOf(tuple(matchers))


def not_(matcher: Matcher) -> Not:
    return Not(matcher)
