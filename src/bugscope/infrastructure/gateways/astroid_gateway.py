"""Python front end: lowers astroid modules into resolved bugscope trees using astroid inference."""

import logging
from collections.abc import Iterable
from pathlib import Path

import astroid
from astroid import bases, nodes
from astroid.builder import AstroidBuilder
from astroid.manager import AstroidManager

from bugscope.domain.constants import DEFAULT_GENERATED_MARKERS
from bugscope.domain.protocols import FrontEndError, FrontEndProtocol
from bugscope.domain.tree import (
    Annotation,
    CompilationUnit,
    Node,
    NodeKind,
    Span,
    Symbol,
    SymbolKind,
    TypeRef,
)

logger = logging.getLogger(__name__)

_STATEMENT_KINDS: dict[type, NodeKind] = {
    nodes.Assign: NodeKind.ASSIGNMENT,
    nodes.AnnAssign: NodeKind.ASSIGNMENT,
    nodes.AugAssign: NodeKind.ASSIGNMENT,
    nodes.Return: NodeKind.RETURN,
    nodes.Expr: NodeKind.EXPRESSION_STATEMENT,
}


class AstroidFrontEnd(FrontEndProtocol):
    """AST intelligence gateway: parse with astroid, resolve names through inference."""

    def __init__(self, generated_markers: tuple[str, ...] = DEFAULT_GENERATED_MARKERS) -> None:
        self.generated_markers = generated_markers

    def parse_file(self, file_path: str) -> CompilationUnit:
        path = Path(file_path)
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FrontEndError(f"Cannot read {file_path}: {exc}") from exc
        return self.parse_source(source, str(path), path.stem)

    def parse_source(self, source: str, path: str = "<string>", module_name: str = "") -> CompilationUnit:
        """
        Parse source and lower it to a CompilationUnit.

        The source is built as-is (astroid.parse would dedent it), so span
        offsets index the exact text a fixer later reads back from disk.
        """
        try:
            module = AstroidBuilder(AstroidManager()).string_build(source, modname=module_name, path=path)
        except astroid.AstroidSyntaxError as exc:
            raise FrontEndError(f"Cannot parse {path}: {exc}") from exc
        tree = _Lowering(source, self.generated_markers).lower(module)
        return CompilationUnit(path=path, source=source, tree=tree)


class _Lowering:
    """One-shot translation of a single astroid module; caches are per unit."""

    def __init__(self, source: str, generated_markers: tuple[str, ...]) -> None:
        self._source = source
        self._markers = generated_markers
        self._line_starts: list[int] = []
        offset = 0
        for line in source.split("\n"):
            self._line_starts.append(offset)
            offset += len(line) + 1
        self._lines = source.split("\n")
        self._types: dict[str, TypeRef] = {}
        self._building: set[str] = set()
        self._symbols: dict[int, Symbol] = {}
        self._resolved: dict[int, tuple[Symbol | None, TypeRef | None]] = {}

    # -- nodes ---------------------------------------------------------------

    def lower(self, node: nodes.NodeNG) -> Node:
        if isinstance(node, nodes.Module):
            return Node(
                kind=NodeKind.COMPILATION_UNIT,
                children=self._lower_all(node.body),
                symbol=self.module_symbol(node),
                span=Span(0, len(self._source)),
                name=node.name,
            )
        if isinstance(node, nodes.ClassDef):
            symbol = self.class_symbol(node)
            return Node(
                kind=NodeKind.CLASS,
                children=self._lower_all([*node.bases, *node.body]),
                symbol=symbol,
                type=symbol.type,
                span=self.span(node),
                name=node.name,
                annotations=symbol.annotations,
            )
        if isinstance(node, nodes.FunctionDef):
            symbol = self.method_symbol(node)
            return Node(
                kind=NodeKind.METHOD,
                children=self._lower_all([node.args, *node.body]),
                symbol=symbol,
                span=self.span(node),
                name=node.name,
                annotations=symbol.annotations,
            )
        if isinstance(node, nodes.Name):
            symbol, type_ref = self.resolve(node)
            return Node(NodeKind.IDENTIFIER, symbol=symbol, type=type_ref, span=self.span(node), name=node.name)
        if isinstance(node, nodes.AssignName):
            return Node(NodeKind.VARIABLE, span=self.span(node), name=node.name)
        if isinstance(node, nodes.Attribute):
            symbol, type_ref = self.resolve(node)
            return Node(
                kind=NodeKind.MEMBER_ACCESS,
                children=(self.lower(node.expr),),
                symbol=symbol,
                type=type_ref,
                span=self.span(node),
                name=node.attrname,
            )
        if isinstance(node, nodes.Call):
            return self._lower_call(node)
        if isinstance(node, nodes.BinOp):
            _, type_ref = self.resolve(node)
            return Node(
                kind=NodeKind.BINARY,
                children=(self.lower(node.left), self.lower(node.right)),
                type=type_ref,
                span=self.span(node),
                operator=node.op,
            )
        if isinstance(node, nodes.UnaryOp):
            return Node(
                kind=NodeKind.UNARY,
                children=(self.lower(node.operand),),
                span=self.span(node),
                operator=node.op,
            )
        if isinstance(node, nodes.Const):
            return Node(NodeKind.LITERAL, type=TypeRef(node.pytype()), span=self.span(node))
        kind = _STATEMENT_KINDS.get(type(node), NodeKind.OTHER)
        return Node(kind=kind, children=self._lower_all(node.get_children()), span=self.span(node))

    def _lower_call(self, node: nodes.Call) -> Node:
        func = self.lower(node.func)
        arguments = [*node.args, *(kw.value for kw in node.keywords or ())]
        callee = func.symbol if func.symbol is not None and func.symbol.kind is SymbolKind.METHOD else None
        _, type_ref = self.resolve(node)
        return Node(
            kind=NodeKind.INVOCATION,
            children=(func, *self._lower_all(arguments)),
            symbol=callee,
            type=type_ref,
            span=self.span(node),
        )

    def _lower_all(self, children: Iterable[nodes.NodeNG]) -> tuple[Node, ...]:
        return tuple(
            self.lower(child)
            for child in children
            if not isinstance(child, nodes.Decorators)
        )

    def span(self, node: nodes.NodeNG) -> Span | None:
        """Character span from astroid's (line, utf-8 byte column) positions."""
        lineno, col = getattr(node, "lineno", None), getattr(node, "col_offset", None)
        end_lineno, end_col = getattr(node, "end_lineno", None), getattr(node, "end_col_offset", None)
        if lineno is None or col is None or end_lineno is None or end_col is None:
            return None
        start = self._offset(lineno, col)
        end = self._offset(end_lineno, end_col)
        if start is None or end is None or end < start:
            return None
        return Span(start, end)

    def _offset(self, lineno: int, byte_col: int) -> int | None:
        if not 1 <= lineno <= len(self._lines):
            return None
        line = self._lines[lineno - 1]
        chars = len(line.encode("utf-8")[:byte_col].decode("utf-8", errors="ignore"))
        return self._line_starts[lineno - 1] + chars

    # -- symbols and types ---------------------------------------------------

    def module_symbol(self, module: nodes.Module) -> Symbol:
        cached = self._symbols.get(id(module))
        if cached is None:
            cached = Symbol(name=module.name or "<module>", kind=SymbolKind.MODULE)
            self._symbols[id(module)] = cached
        return cached

    def scope_symbol(self, scope: nodes.NodeNG | None) -> Symbol | None:
        if isinstance(scope, nodes.ClassDef):
            return self.class_symbol(scope)
        if isinstance(scope, nodes.FunctionDef):
            return self.method_symbol(scope)
        if isinstance(scope, nodes.Module):
            return self.module_symbol(scope)
        return None

    def class_symbol(self, node: nodes.ClassDef) -> Symbol:
        cached = self._symbols.get(id(node))
        if cached is not None:
            return cached
        annotations = self.annotations(node)
        symbol = Symbol(
            name=node.name,
            kind=SymbolKind.CLASS,
            owner=self.scope_symbol(node.parent.frame()) if node.parent is not None else None,
            type=self.type_ref(node),
            generated_by=self.provenance(annotations),
            annotations=annotations,
        )
        self._symbols[id(node)] = symbol
        return symbol

    def method_symbol(self, node: nodes.FunctionDef) -> Symbol:
        cached = self._symbols.get(id(node))
        if cached is not None:
            return cached
        params = [a.name for a in (node.args.args or [])] + [a.name for a in (node.args.kwonlyargs or [])]
        if node.type in ("method", "classmethod") and node.args.args:
            params = params[1:]
        annotations = self.annotations(node)
        symbol = Symbol(
            name=node.name,
            kind=SymbolKind.METHOD,
            owner=self.scope_symbol(node.parent.frame()) if node.parent is not None else None,
            parameters=tuple(params),
            is_static=node.type != "method",
            generated_by=self.provenance(annotations),
            annotations=annotations,
        )
        self._symbols[id(node)] = symbol
        return symbol

    def type_ref(self, node: nodes.ClassDef) -> TypeRef:
        """TypeRef for a class with its direct supertypes; cycles are cut."""
        qname = node.qname()
        cached = self._types.get(qname)
        if cached is not None:
            return cached
        if qname in self._building:
            return TypeRef(qname)
        self._building.add(qname)
        try:
            supertypes = tuple(self.type_ref(base) for base in node.ancestors(recurs=False))
        except astroid.AstroidError:
            logger.debug("Could not resolve bases of %s", qname)
            supertypes = ()
        finally:
            self._building.discard(qname)
        type_ref = TypeRef(qname, supertypes=supertypes)
        self._types[qname] = type_ref
        return type_ref

    def annotations(self, node: nodes.ClassDef | nodes.FunctionDef) -> tuple[Annotation, ...]:
        """Decorators read as annotations: @Name, @pkg.Name, @Name("arg", ...)."""
        if not node.decorators:
            return ()
        found: list[Annotation] = []
        for decorator in node.decorators.nodes:
            target, arguments = decorator, ()
            if isinstance(decorator, nodes.Call):
                target = decorator.func
                arguments = tuple(
                    a.value for a in decorator.args if isinstance(a, nodes.Const) and isinstance(a.value, str)
                )
            name = _dotted_name(target)
            if name:
                found.append(Annotation(name=name, arguments=arguments))
        return tuple(found)

    def provenance(self, annotations: tuple[Annotation, ...]) -> frozenset[str]:
        mechanisms: set[str] = set()
        for annotation in annotations:
            if any(annotation.matches(marker) for marker in self._markers):
                mechanisms.update(annotation.arguments or (annotation.name,))
        return frozenset(mechanisms)

    def resolve(self, node: nodes.NodeNG) -> tuple[Symbol | None, TypeRef | None]:
        """Symbol and type of an expression via astroid inference; (None, None) when unresolved."""
        cached = self._resolved.get(id(node))
        if cached is not None:
            return cached
        result = self._resolve(node, _infer_first(node))
        self._resolved[id(node)] = result
        return result

    def _resolve(
        self, node: nodes.NodeNG, inferred: object
    ) -> tuple[Symbol | None, TypeRef | None]:
        if inferred is None:
            return None, None
        if isinstance(inferred, nodes.ClassDef):
            symbol = self.class_symbol(inferred)
            return symbol, symbol.type
        # BoundMethod proxies an UnboundMethod, which proxies the FunctionDef
        while isinstance(inferred, bases.UnboundMethod):
            inferred = inferred._proxied
        if isinstance(inferred, nodes.FunctionDef):
            return self.method_symbol(inferred), None
        if isinstance(inferred, nodes.Module):
            return self.module_symbol(inferred), None
        type_ref = None
        if isinstance(inferred, bases.Instance) and isinstance(inferred._proxied, nodes.ClassDef):
            type_ref = self.type_ref(inferred._proxied)
        return self._value_symbol(node, type_ref), type_ref

    def _value_symbol(self, node: nodes.NodeNG, type_ref: TypeRef | None) -> Symbol | None:
        if isinstance(node, nodes.Name):
            try:
                scope, _ = node.lookup(node.name)
            except astroid.AstroidError:
                scope = None
            return Symbol(
                name=node.name,
                kind=SymbolKind.VARIABLE,
                owner=self.scope_symbol(scope),
                type=type_ref,
            )
        if isinstance(node, nodes.Attribute):
            return Symbol(name=node.attrname, kind=SymbolKind.FIELD, type=type_ref)
        return None


def _infer_first(node: nodes.NodeNG) -> object | None:
    """First inferred value other than Uninferable, or None."""
    try:
        for inferred in node.infer():
            if inferred is astroid.Uninferable:
                continue
            return inferred
    except (astroid.AstroidError, AttributeError):
        return None
    return None


def _dotted_name(node: nodes.NodeNG) -> str | None:
    if isinstance(node, nodes.Name):
        return node.name
    if isinstance(node, nodes.Attribute):
        prefix = _dotted_name(node.expr)
        return f"{prefix}.{node.attrname}" if prefix else node.attrname
    return None
