#!/usr/bin/env python3
"""
SLIM2ERB CONVERSION PIPELINE
----------------------------
Runs one document through lexing, generation and the output check in a
fixed order and hands back a ConversionContext.

Author: Slim2ERB Team
Date: 2026-10-18
"""

from typing import Optional

from slim2erb.conversion.context import ConversionContext
from slim2erb.conversion.generator import ErbGenerator, GeneratorOptions
from slim2erb.conversion.lexer import SlimLexer
from slim2erb.validator.validator import ErbValidator


class ConversionPipeline:
    """
    The Orchestrator: the lexer and generator never see each other, only
    the node sequence passed between them here.
    """

    def __init__(self, options: Optional[GeneratorOptions] = None):
        self.options = options or GeneratorOptions()
        self.lexer = SlimLexer()
        self.generator = ErbGenerator(self.options)
        self.validator = ErbValidator(check_statements=self.options.close_statements)

    def run(self, source: str, file_path: Optional[str] = None) -> ConversionContext:
        context = ConversionContext(source=source, file_path=file_path)

        # --- PHASE 1: LINE PARSING ---
        result = self.lexer.parse(source)
        context.nodes = result.nodes
        context.diagnostics = result.diagnostics

        # --- PHASE 2: GENERATION ---
        context.output = self.generator.generate(result.nodes)

        # --- PHASE 3: OUTPUT CHECK ---
        context.validation_errors = self.validator.validate(context.output)

        return context


def convert(source: str, options: Optional[GeneratorOptions] = None) -> str:
    """Slim text in, ERB text out."""
    return ConversionPipeline(options).run(source).output
