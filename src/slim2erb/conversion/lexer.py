#!/usr/bin/env python3
"""
SLIM2ERB LEXER - Line Parser
----------------------------
Decomposes raw Slim text into a flat sequence of Node models, one node per
non-blank line, each carrying the indentation depth of its source line.

Classification is prefix based and first-match-wins:

    /          comment
    doctype    doctype (also !!!)
    =<space>   code expression
    -<space>   code statement
    |<space>   plain text
    anything   tag (name, .class/#id shortcuts, key=value attributes, inline content)

The lexer is permissive: every line becomes *some* node. Suspicious input
is reported as advisory diagnostics on the ParseResult, never raised.

Author: Slim2ERB Team
Date: 2026-10-18
"""

import re
from typing import Dict, List, Optional, Tuple

from slim2erb.core.models import Node, NodeKind, ParseResult

DEFAULT_TAG = "div"

TAG_NAME_PATTERN = re.compile(r'^([a-zA-Z][a-zA-Z0-9]*)')
CLASS_PATTERN = re.compile(r'\.([a-zA-Z0-9_-]+)')
ID_PATTERN = re.compile(r'#([a-zA-Z0-9_-]+)')
# Group 1: key, Group 2: "double", Group 3: 'single', Group 4: bare
ATTRIBUTE_PATTERN = re.compile(r'([a-zA-Z0-9_-]+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\'|(\S+))')


class SlimLexer:
    """
    Turns Slim source into Nodes. State lives only for the duration of one
    parse() call and is reset at its start.
    """

    def __init__(self):
        self.diagnostics: List[str] = []
        self.line_no = 0

    def _clean_artifacts(self, text: str) -> str:
        """
        Removes the UTF-8 BOM marker and standardizes line endings.
        """
        text = text.lstrip('\ufeff')
        return text.replace('\r\n', '\n').replace('\r', '\n')

    def _diagnose(self, message: str):
        self.diagnostics.append(f"line {self.line_no}: {message}")

    def _split_head(self, head: str) -> Tuple[str, Dict[str, str]]:
        """
        Splits "p.lead#intro" into ("p", {"class": "lead", "id": "intro"}).
        """
        match = TAG_NAME_PATTERN.match(head)
        tag_name = match.group(1) if match else DEFAULT_TAG
        shortcuts = head[match.end():] if match else head
        return tag_name, self._parse_shortcuts(shortcuts)

    def _parse_shortcuts(self, shortcuts: str) -> Dict[str, str]:
        attributes = {}

        classes = CLASS_PATTERN.findall(shortcuts)
        if classes:
            attributes["class"] = " ".join(classes)

        id_match = ID_PATTERN.search(shortcuts)
        if id_match:
            attributes["id"] = id_match.group(1)

        return attributes

    def _parse_attributes(self, rest: str) -> Dict[str, str]:
        """Extracts key="value", key='value' and key=value pairs, in order."""
        attributes = {}
        for match in ATTRIBUTE_PATTERN.finditer(rest):
            key, double_quoted, single_quoted, bare = match.groups()
            if double_quoted is not None:
                value = double_quoted
            elif single_quoted is not None:
                value = single_quoted
            else:
                value = bare
                if value[0] in ('"', "'"):
                    self._diagnose(f"unterminated quoted attribute value in '{match.group(0)}'")
            attributes[key] = value
        return attributes

    def _merge_attributes(self, shorthand: Dict[str, str], explicit: Dict[str, str]) -> Dict[str, str]:
        """Shorthand classes come first; an explicit class is appended after a space."""
        merged = dict(shorthand)
        for key, value in explicit.items():
            if key == "class" and "class" in merged:
                merged["class"] = f"{merged['class']} {value}"
            else:
                merged[key] = value
        return merged

    def _inline_node(self, kind: NodeKind, content: str, indent: int, raw_line: str) -> Node:
        return Node(kind=kind, indent_depth=indent, content=content,
                    line_no=self.line_no, raw_line=raw_line)

    def parse_tag(self, content: str, indent: int, raw_line: str) -> Node:
        """
        Handles everything that is not a special-prefix line.
        Example: 'a.btn href="/x" Go' -> Tag(a, {class: btn, href: /x}, [Text(Go)])
        """
        tokens = content.split()
        head = tokens[0] if tokens else ""

        # Branch 1: "p.lead= @user.name" -- the '=' sits inside the head token
        if "=" in head:
            equal_index = content.index("=")
            expression = content[equal_index + 1:].strip()
            if expression:
                tag_name, attributes = self._split_head(content[:equal_index])
                return Node(
                    kind=NodeKind.TAG,
                    indent_depth=indent,
                    tag_name=tag_name,
                    attributes=attributes,
                    children=[self._inline_node(NodeKind.CODE_EXPRESSION, expression, indent, raw_line)],
                    line_no=self.line_no,
                    raw_line=raw_line,
                )

        # Branch 2: head, then attributes, then inline content
        tag_name, shorthand = self._split_head(head)
        rest = " ".join(tokens[1:])
        explicit = self._parse_attributes(rest)
        leftover = ATTRIBUTE_PATTERN.sub("", rest).strip()

        node = Node(
            kind=NodeKind.TAG,
            indent_depth=indent,
            tag_name=tag_name,
            attributes=self._merge_attributes(shorthand, explicit),
            line_no=self.line_no,
            raw_line=raw_line,
        )

        if leftover:
            if leftover.startswith("= "):
                node.children.append(self._inline_node(NodeKind.CODE_EXPRESSION, leftover[2:], indent, raw_line))
            else:
                node.children.append(self._inline_node(NodeKind.TEXT, leftover, indent, raw_line))

        return node

    def parse_line(self, line: str) -> Optional[Node]:
        """
        Classifies one source line. Returns None for blank lines.
        """
        trimmed = line.strip()
        if not trimmed:
            return None

        indent = len(line) - len(line.lstrip())
        if "\t" in line[:indent]:
            self._diagnose("tab character in indentation")

        if trimmed.startswith("/"):
            return Node(NodeKind.COMMENT, indent, content=trimmed[1:].strip(),
                        line_no=self.line_no, raw_line=line)

        if trimmed.startswith(("doctype", "!!!")):
            return Node(NodeKind.DOCTYPE, indent, content=trimmed,
                        line_no=self.line_no, raw_line=line)

        if trimmed.startswith("= "):
            return Node(NodeKind.CODE_EXPRESSION, indent, content=trimmed[2:],
                        line_no=self.line_no, raw_line=line)

        if trimmed.startswith("- "):
            return Node(NodeKind.CODE_STATEMENT, indent, content=trimmed[2:],
                        line_no=self.line_no, raw_line=line)

        if trimmed.startswith("| "):
            return Node(NodeKind.TEXT, indent, content=trimmed[2:],
                        line_no=self.line_no, raw_line=line)

        return self.parse_tag(trimmed, indent, line)

    def parse(self, source: str) -> ParseResult:
        """
        Decomposes a Slim document into a ParseResult.
        This is the primary interface for the ConversionPipeline.
        """
        self.diagnostics = []
        self.line_no = 0
        nodes = []

        for index, line in enumerate(self._clean_artifacts(source).split("\n")):
            self.line_no = index + 1
            node = self.parse_line(line)
            if node is not None:
                nodes.append(node)

        return ParseResult(nodes=nodes, diagnostics=self.diagnostics)


def parse(source: str) -> ParseResult:
    """Parses Slim source with a fresh lexer."""
    return SlimLexer().parse(source)
