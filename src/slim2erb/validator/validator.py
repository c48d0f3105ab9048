#!/usr/bin/env python3
"""
SLIM2ERB VALIDATOR - The Judge
------------------------------
The final safety gate before the engine writes anything to disk. It checks
that the generated ERB is structurally sound: every HTML element that was
opened is closed in last-opened-first-closed order, and every ERB block
statement is matched by an <% end %>.

The check is textual. Expressions and comments are removed before tags
are counted; an expression only counts as a block opener when it ends in
`do`.

Author: Slim2ERB Team
Date: 2026-10-18
"""

import logging
import re
from typing import List, Tuple

from slim2erb.conversion.generator import DO_BLOCK_PATTERN, VOID_ELEMENTS

logger = logging.getLogger("slim2erb.validator")

ERB_TAG_PATTERN = re.compile(r'<%([=#]?)(.*?)%>', re.DOTALL)
# Attribute values are always double quoted by the generator
HTML_TAG_PATTERN = re.compile(
    r'<(/?)([a-zA-Z][a-zA-Z0-9]*)((?:\s+[^\s"\'<>/=]+(?:="[^"]*")?)*)\s*(/?)>'
)

BLOCK_OPENERS = ("if", "unless", "case", "while", "until", "for", "begin")
BLOCK_MIDDLES = ("else", "elsif", "when", "in", "rescue", "ensure")


class ErbValidator:
    """
    Structural checker for generated ERB. Returns human-readable problems
    instead of raising, so the engine can decide whether to write anyway.
    """

    def __init__(self, check_statements: bool = True):
        self.check_statements = check_statements

    def _statement_role(self, statement: str) -> str:
        words = statement.split()
        if not words:
            return "plain"
        if words[0] == "end":
            return "close"
        if words[0] in BLOCK_MIDDLES:
            return "middle"
        if words[0] in BLOCK_OPENERS or DO_BLOCK_PATTERN.search(statement):
            return "open"
        return "plain"

    def _check_statements(self, output: str) -> List[str]:
        errors = []
        depth = 0
        for match in ERB_TAG_PATTERN.finditer(output):
            marker, body = match.groups()
            if marker == "#":
                continue
            if marker == "=":
                # Only block-taking output code ("form_for x do |f|") opens a block
                role = "open" if DO_BLOCK_PATTERN.search(body.strip()) else "plain"
            else:
                role = self._statement_role(body.strip())
            if role == "open":
                depth += 1
            elif role == "middle" and depth == 0:
                errors.append(f"'<% {body.strip()} %>' outside of any block")
            elif role == "close":
                if depth == 0:
                    errors.append("'<% end %>' without an open block")
                else:
                    depth -= 1
        if depth:
            errors.append(f"{depth} ERB block(s) not closed with '<% end %>'")
        return errors

    def _check_elements(self, output: str) -> List[str]:
        errors = []
        markup = ERB_TAG_PATTERN.sub("", output)
        open_tags: List[str] = []

        for match in HTML_TAG_PATTERN.finditer(markup):
            closing, name, _, self_closing = match.groups()
            name = name.lower()
            if name in VOID_ELEMENTS or self_closing:
                continue
            if not closing:
                open_tags.append(name)
            elif not open_tags:
                errors.append(f"unexpected </{name}>")
            elif open_tags[-1] != name:
                errors.append(f"mismatched </{name}>, expected </{open_tags[-1]}>")
                if name in open_tags:
                    # Recover by unwinding to the matching element
                    while open_tags.pop() != name:
                        pass
            else:
                open_tags.pop()

        for name in reversed(open_tags):
            errors.append(f"unclosed <{name}>")
        return errors

    def validate(self, output: str) -> List[str]:
        errors = self._check_elements(output)
        if self.check_statements:
            errors.extend(self._check_statements(output))
        for error in errors:
            logger.debug(f"Validation: {error}")
        return errors

    def validate_output(self, output: str) -> Tuple[bool, str]:
        """
        The primary integrity check. (True, "") when the ERB is balanced,
        otherwise (False, <first problem>).
        """
        errors = self.validate(output)
        if errors:
            return False, f"Validation Failed: {errors[0]}"
        return True, ""
