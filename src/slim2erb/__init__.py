"""
Slim2ERB - converts indentation-structured Slim templates into ERB.

The core API is two pure functions, parse() and generate(), plus the
convert() shortcut that chains them.
"""

__version__ = "1.0.0"

from slim2erb.conversion.generator import ErbGenerator, GeneratorOptions, generate
from slim2erb.conversion.lexer import SlimLexer, parse
from slim2erb.conversion.pipeline import ConversionPipeline, convert
from slim2erb.core.models import Node, NodeKind, ParseResult

__all__ = [
    "ConversionPipeline",
    "ErbGenerator",
    "GeneratorOptions",
    "Node",
    "NodeKind",
    "ParseResult",
    "SlimLexer",
    "convert",
    "generate",
    "parse",
]
