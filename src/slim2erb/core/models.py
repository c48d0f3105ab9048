#!/usr/bin/env python3
"""
SLIM2ERB CORE MODELS
--------------------
Defines the fundamental data structures shared by the parser and the
generator. A document is represented as a flat sequence of Nodes; block
nesting is never stored as containment, only implied by indent_depth.

Author: Slim2ERB Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class NodeKind(Enum):
    """The closed set of line-level constructs a Slim line can produce."""
    TAG = "tag"
    TEXT = "text"
    CODE_STATEMENT = "code_statement"
    CODE_EXPRESSION = "code_expression"
    COMMENT = "comment"
    DOCTYPE = "doctype"


@dataclass
class Node:
    """
    The atomic unit of a parsed Slim document.

    A Node represents a single source line. Content placed on the same line
    as a tag lives in `children` (at most one inline node); content nested
    beneath it is simply the following nodes at a deeper indent_depth.
    """
    kind: NodeKind
    indent_depth: int = 0                 # Leading whitespace count of the source line
    tag_name: Optional[str] = None        # Only for TAG nodes
    attributes: Dict[str, str] = field(default_factory=dict)
    content: Optional[str] = None         # Payload for every non-TAG kind
    children: List["Node"] = field(default_factory=list)
    line_no: int = 0                      # 1-based source line
    raw_line: str = ""                    # The original unmutated line

    @property
    def inline_child(self) -> Optional["Node"]:
        return self.children[0] if self.children else None


@dataclass
class ParseResult:
    """Nodes in document order plus advisory diagnostics; parsing never aborts."""
    nodes: List[Node] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)
