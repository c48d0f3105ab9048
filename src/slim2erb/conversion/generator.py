#!/usr/bin/env python3
"""
SLIM2ERB GENERATOR - The Architect
----------------------------------
Re-linearizes the flat, depth-annotated Node sequence into nested ERB.

Nesting is rebuilt purely from depth comparisons: a tag, a code statement
or output code ending in `do` opens a block only when the following node
is strictly deeper, and every open block is closed as soon as a node at
the same or a shallower depth comes along. Open blocks live on a stack of small
(name, depth, closer) entries.

Author: Slim2ERB Team
Date: 2026-10-18
"""

import re
from dataclasses import dataclass
from typing import List, NamedTuple, Optional

from slim2erb.core.errors import ConfigurationError
from slim2erb.core.models import Node, NodeKind

HTML5_DOCTYPES = ("doctype html", "!!! 5")

VOID_ELEMENTS = frozenset([
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
])

# Statements that continue an open block instead of starting a new one
CONTINUATION_KEYWORDS = ("else", "elsif", "when", "in", "rescue", "ensure")

STATEMENT_END = "<% end %>"

# "form_for @user do |f|": output code that takes a block body
DO_BLOCK_PATTERN = re.compile(r'\bdo\s*(\|[^|]*\|)?\s*$')


@dataclass
class GeneratorOptions:
    indent_size: int = 1            # Output spaces per column of source depth
    emit_comments: bool = True      # Emit '/' comments as <%# %>
    close_statements: bool = True   # Infer <% end %> for indented statement blocks
    void_elements: bool = False     # Render empty <br>, <img>, ... without a closing tag


class OpenBlock(NamedTuple):
    name: str
    indent_depth: int
    closer: str
    is_statement: bool = False


def _is_continuation(node: Optional[Node]) -> bool:
    if node is None or node.kind is not NodeKind.CODE_STATEMENT or not node.content:
        return False
    words = node.content.split()
    return bool(words) and words[0] in CONTINUATION_KEYWORDS


class ErbGenerator:
    """
    Walks nodes in document order with one node of lookahead.
    Output and stack are reset at the start of every generate() call.
    """

    def __init__(self, options: Optional[GeneratorOptions] = None):
        self.options = options or GeneratorOptions()
        size = self.options.indent_size
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise ConfigurationError(f"indent_size must be a positive integer, got {size!r}")

        self.output: List[str] = []
        self.stack: List[OpenBlock] = []
        self._continuing = False

    def _indent(self, depth: int) -> str:
        return " " * (depth * self.options.indent_size)

    def format_attributes(self, attributes: dict) -> str:
        """
        Renders ' key="value" ...' in insertion order. Empty values and
        values equal to their key collapse to bare boolean attributes.
        """
        parts = []
        for key, value in attributes.items():
            if value == "" or value == key:
                parts.append(key)
            else:
                escaped = value.replace('"', "&quot;")
                parts.append(f'{key}="{escaped}"')
        return " " + " ".join(parts) if parts else ""

    def _generate_tag(self, node: Node, next_node: Optional[Node]):
        indent = self._indent(node.indent_depth)
        name = node.tag_name or "div"
        opening = f"<{name}{self.format_attributes(node.attributes)}>"
        child = node.inline_child

        if child is not None and len(node.children) == 1 and child.kind is NodeKind.TEXT:
            self.output.append(f"{indent}{opening}{child.content or ''}</{name}>")
        elif child is not None and len(node.children) == 1 and child.kind is NodeKind.CODE_EXPRESSION:
            self.output.append(f"{indent}{opening}<%= {child.content or ''} %></{name}>")
        elif child is None and next_node is not None and next_node.indent_depth > node.indent_depth:
            self.output.append(f"{indent}{opening}")
            self.stack.append(OpenBlock(name, node.indent_depth, f"</{name}>"))
        elif child is None and self.options.void_elements and name.lower() in VOID_ELEMENTS:
            self.output.append(f"{indent}{opening}")
        else:
            self.output.append(f"{indent}{opening}</{name}>")

    def _generate_statement(self, node: Node, next_node: Optional[Node]):
        self.output.append(f"{self._indent(node.indent_depth)}<% {node.content or ''} %>")
        if not self.options.close_statements:
            return
        opens_block = next_node is not None and next_node.indent_depth > node.indent_depth
        if opens_block or self._continuing:
            self.stack.append(OpenBlock(node.content or "", node.indent_depth, STATEMENT_END, True))

    def _generate_expression(self, node: Node, next_node: Optional[Node]):
        content = node.content or ""
        self.output.append(f"{self._indent(node.indent_depth)}<%= {content} %>")
        if not self.options.close_statements or not DO_BLOCK_PATTERN.search(content):
            return
        if next_node is not None and next_node.indent_depth > node.indent_depth:
            self.stack.append(OpenBlock(content, node.indent_depth, STATEMENT_END, True))

    def _generate_comment(self, node: Node):
        content = node.content or ""
        indent = self._indent(node.indent_depth)
        if content.startswith("!"):
            # Slim '/!' comments are meant to reach the rendered HTML
            self.output.append(f"{indent}<!-- {content[1:].strip()} -->")
        elif self.options.emit_comments:
            self.output.append(f"{indent}<%# {content} %>")

    def _generate_doctype(self, node: Node):
        if node.content in HTML5_DOCTYPES:
            self.output.append("<!DOCTYPE html>")
        else:
            self.output.append(f"<!DOCTYPE {node.content or 'html'}>")

    def _process_node(self, node: Node, next_node: Optional[Node]):
        kind = node.kind
        if kind is NodeKind.TAG:
            self._generate_tag(node, next_node)
        elif kind is NodeKind.TEXT:
            self.output.append(f"{self._indent(node.indent_depth)}{node.content or ''}")
        elif kind is NodeKind.CODE_STATEMENT:
            self._generate_statement(node, next_node)
        elif kind is NodeKind.CODE_EXPRESSION:
            self._generate_expression(node, next_node)
        elif kind is NodeKind.COMMENT:
            self._generate_comment(node)
        elif kind is NodeKind.DOCTYPE:
            self._generate_doctype(node)
        self._continuing = False

    def close_blocks_to(self, depth: int, next_node: Optional[Node] = None):
        """
        Pops and closes every open block at or deeper than `depth`.
        A continuation statement at exactly an open statement's depth takes
        that block over, so no <% end %> is written for it.
        """
        while self.stack and self.stack[-1].indent_depth >= depth:
            block = self.stack.pop()
            if block.is_statement and block.indent_depth == depth and _is_continuation(next_node):
                self._continuing = True
                break
            self.output.append(f"{self._indent(block.indent_depth)}{block.closer}")

    def generate(self, nodes: List[Node]) -> str:
        """Produces the ERB document; lines joined with '\\n', no trailing newline."""
        self.output = []
        self.stack = []
        self._continuing = False

        for index, node in enumerate(nodes):
            next_node = nodes[index + 1] if index + 1 < len(nodes) else None
            self._process_node(node, next_node)
            if next_node is not None:
                self.close_blocks_to(next_node.indent_depth, next_node)

        self.close_blocks_to(0)
        return "\n".join(self.output)


def generate(nodes: List[Node], options: Optional[GeneratorOptions] = None) -> str:
    """Generates ERB with a fresh generator."""
    return ErbGenerator(options).generate(nodes)
