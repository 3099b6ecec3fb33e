"""Span mapper: node -> source range and source text. Pure lookups over an immutable buffer."""

from bisect import bisect_right
from collections.abc import Sequence

from bugscope.domain.tree import CompilationUnit, NoSourceSpan, Node, Span


class SpanMapper:
    """Maps nodes of one compilation unit back to their original source text."""

    def __init__(self, unit: CompilationUnit) -> None:
        self._source = unit.source
        starts = [0]
        for index, char in enumerate(self._source):
            if char == "\n":
                starts.append(index + 1)
        self._line_starts = starts

    @property
    def source(self) -> str:
        return self._source

    def has_span(self, node: Node) -> bool:
        return node.span is not None and node.span.end <= len(self._source)

    def span_of(self, node: Node) -> Span:
        """Return the node's span; raise NoSourceSpan for synthetic nodes."""
        span = node.span
        if span is None or span.end > len(self._source):
            raise NoSourceSpan(node)
        return span

    def text(self, span: Span) -> str:
        return self._source[span.start:span.end]

    def source_for(self, node: Node) -> str:
        """Literal original text of the node."""
        return self.text(self.span_of(node))

    def enclosing_span(self, node: Node, path: Sequence[Node] = ()) -> Span | None:
        """The node's own span, else the nearest spanned ancestor on path (innermost last)."""
        if self.has_span(node):
            return node.span
        for ancestor in reversed(path):
            if self.has_span(ancestor):
                return ancestor.span
        return None

    def line_col(self, offset: int) -> tuple[int, int]:
        """1-based line and 0-based column of an offset."""
        line_index = bisect_right(self._line_starts, offset) - 1
        return line_index + 1, offset - self._line_starts[line_index]
