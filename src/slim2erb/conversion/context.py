#!/usr/bin/env python3
"""
SLIM2ERB CONVERSION CONTEXT
---------------------------
The record of a single document passing through the pipeline. It stores
the raw source, what the lexer made of it, and the generated ERB.

Author: Slim2ERB Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from typing import List, Optional

from slim2erb.core.models import Node


@dataclass
class ConversionContext:
    """
    Initialized by the ConversionPipeline and filled in phase by phase.
    """
    source: str                                        # The raw Slim input
    file_path: Optional[str] = None                    # Where the source came from, if a file
    nodes: List[Node] = field(default_factory=list)    # Lexer output in document order
    diagnostics: List[str] = field(default_factory=list)
    output: str = ""                                   # The generated ERB
    validation_errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors
