"""Subtype and provenance queries, cached per compilation unit."""

from collections import deque
from collections.abc import Callable

from bugscope.domain.tree import (
    Annotation,
    CompilationUnit,
    Node,
    Symbol,
    TypeRef,
    get_type,
)

ProvenanceQuery = Callable[[Symbol], frozenset[str]]


def declared_provenance(symbol: Symbol) -> frozenset[str]:
    """Default provenance query: the marker precomputed by the front end."""
    return symbol.generated_by


class ResolutionContext:
    """
    Symbol/type lookups for one compilation unit.

    Every query is total: missing or partially resolved input yields False or
    an empty result rather than an exception. Caches live as long as the
    context, which is created per unit and never shared between traversals.
    """

    def __init__(
        self,
        unit: CompilationUnit,
        provenance: ProvenanceQuery | None = None,
    ) -> None:
        self.unit = unit
        self._provenance = provenance or declared_provenance
        self._closures: dict[TypeRef, frozenset[str]] = {}
        self._generated: dict[Symbol, frozenset[str]] = {}

    def symbol_of(self, node: Node | None) -> Symbol | None:
        return node.symbol if node is not None else None

    def type_of(self, node: Node | None) -> TypeRef | None:
        return get_type(node)

    def supertype_names(self, type_ref: TypeRef) -> frozenset[str]:
        """Erased names of type_ref and all of its transitive supertypes."""
        cached = self._closures.get(type_ref)
        if cached is not None:
            return cached
        names: set[str] = set()
        queue: deque[TypeRef] = deque([type_ref])
        while queue:
            current = queue.popleft()
            if current.erasure in names:
                continue
            names.add(current.erasure)
            queue.extend(current.supertypes)
        closure = frozenset(names)
        self._closures[type_ref] = closure
        return closure

    def is_subtype(self, subtype: TypeRef | None, supertype: TypeRef | str | None) -> bool:
        """Reflexive, transitive subtype check over declared supertypes (erased)."""
        if subtype is None or supertype is None:
            return False
        target = supertype if isinstance(supertype, str) else supertype.erasure
        return target in self.supertype_names(subtype)

    def generated_by(self, symbol: Symbol | None) -> frozenset[str]:
        """Mechanisms that produced symbol; empty when hand-authored or unknown."""
        if symbol is None:
            return frozenset()
        cached = self._generated.get(symbol)
        if cached is not None:
            return cached
        mechanisms = frozenset(self._provenance(symbol))
        self._generated[symbol] = mechanisms
        return mechanisms

    def is_generated(self, symbol: Symbol | None) -> bool:
        return bool(self.generated_by(symbol))

    def annotations_of(self, target: Node | Symbol | None) -> tuple[Annotation, ...]:
        """Annotations on a declaration node, followed by those on its symbol."""
        if target is None:
            return ()
        if isinstance(target, Symbol):
            return target.annotations
        own = target.annotations
        return own + target.symbol.annotations if target.symbol is not None else own

    def find_annotation(self, target: Node | Symbol | None, name: str) -> Annotation | None:
        for annotation in self.annotations_of(target):
            if annotation.matches(name):
                return annotation
        return None

    def has_annotation(self, target: Node | Symbol | None, name: str) -> bool:
        return self.find_annotation(target, name) is not None
