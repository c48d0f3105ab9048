"""
Structural guarantees that must hold for any input, not just the
hand-written samples.
"""

import re

import pytest

from slim2erb import convert, generate, parse
from slim2erb.core.models import NodeKind
from slim2erb.validator.validator import ErbValidator

TAG_PATTERN = re.compile(r'<(/?)([a-zA-Z][a-zA-Z0-9]*)[^<>]*>')

IRREGULAR_DOCUMENTS = [
    "div\n  p First\n    span Nested\n  p Second",
    "div\n      p\n  span\n    em\n b",
    ".level1\n  .level2\n    .level3\n      .level4\n        .level5\n          p Deep content",
    ".parent\n  .child1\n    p Nested\n  .child2\n    p Sibling",
    "ul\n    li\n  li\nol\n li\n   a\n     b\n i",
    "section\n  article\n    header\n      h1 Title\n\n\n    footer\nsection\n  p",
    "  div\n p\ndiv\n\t\tspan\n  em",
]

NEVER_FAIL_INPUTS = [
    "", "   ", "\n\n\n", "\t\t", "日本語のテキスト", "=", "-", "|", "/", "!!!",
    "p=", "a b=", 'x="', "\ufeff", "\r\n\r\n", "- else", "  - else\n- when x",
    "= \n- \n| ", "#", ".", "#.#.", "😀 😀=😀", "div\x00span", "a\rb\rc",
]


def html_tags(erb):
    markup = re.sub(r'<%.*?%>', '', erb, flags=re.DOTALL)
    return TAG_PATTERN.findall(markup)


@pytest.mark.parametrize("slim", IRREGULAR_DOCUMENTS)
def test_output_is_always_balanced(slim):
    """
    BALANCE TEST: every opened tag is closed, last-opened-first-closed,
    however ragged the indentation.
    """
    stack = []
    for closing, name in html_tags(convert(slim)):
        if closing:
            assert stack and stack[-1] == name, f"</{name}> closes the wrong element"
            stack.pop()
        else:
            stack.append(name)
    assert stack == []


@pytest.mark.parametrize("slim", IRREGULAR_DOCUMENTS)
def test_validator_agrees_on_balance(slim):
    assert ErbValidator().validate(convert(slim)) == []


@pytest.mark.parametrize("slim", IRREGULAR_DOCUMENTS)
def test_tag_opens_block_only_when_next_node_is_deeper(slim):
    nodes = parse(slim).nodes
    lines = generate(nodes).split("\n")
    # Bare tags without inline content: one output line per node, in order
    openers = [line.strip() for line in lines if not line.strip().startswith("</")]
    assert len(openers) == len(nodes)
    for index, node in enumerate(nodes):
        if node.kind is not NodeKind.TAG or node.children:
            continue
        is_block = index + 1 < len(nodes) and nodes[index + 1].indent_depth > node.indent_depth
        self_contained = openers[index].endswith(f"</{node.tag_name}>")
        assert is_block != self_contained


@pytest.mark.parametrize("slim, expected", [
    ('p.a.b class="c" x', "a b c"),
    ('p.a class="b c"', "a b c"),
    ("span.z class=y", "z y"),
])
def test_shorthand_class_always_precedes_explicit_class(slim, expected):
    assert parse(slim).nodes[0].attributes["class"] == expected


@pytest.mark.parametrize("content", [
    '@user.name.upcase + "<b>"',
    "link_to 'x', y, data: { a: \"&quot;\" }",
    "  leading spaces kept",
    "ünïcödé → ✓",
])
def test_code_and_text_content_pass_through_unchanged(content):
    assert convert(f"= {content}") == f"<%= {content} %>"
    assert convert(f"| {content}") == content
    assert convert(f"- {content}") == f"<% {content} %>"


@pytest.mark.parametrize("source", NEVER_FAIL_INPUTS)
def test_parse_and_generate_never_raise(source):
    result = parse(source)
    assert isinstance(generate(result.nodes), str)
