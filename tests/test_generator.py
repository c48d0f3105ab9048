import pytest

from slim2erb.conversion.generator import ErbGenerator, GeneratorOptions, generate
from slim2erb.core.errors import ConfigurationError
from slim2erb.core.models import Node, NodeKind


def tag(name, depth=0, attributes=None, child=None):
    return Node(NodeKind.TAG, depth, tag_name=name, attributes=attributes or {},
                children=[child] if child else [])


def text(content, depth=0):
    return Node(NodeKind.TEXT, depth, content=content)


def expr(content, depth=0):
    return Node(NodeKind.CODE_EXPRESSION, depth, content=content)


def stmt(content, depth=0):
    return Node(NodeKind.CODE_STATEMENT, depth, content=content)


def comment(content, depth=0):
    return Node(NodeKind.COMMENT, depth, content=content)


def test_empty_tag():
    assert generate([tag("div")]) == "<div></div>"


def test_tag_with_text_child():
    assert generate([tag("p", child=text("Hello World"))]) == "<p>Hello World</p>"


def test_tag_with_expression_child():
    assert generate([tag("p", child=expr("@user.name"))]) == "<p><%= @user.name %></p>"


def test_attributes_render_in_insertion_order():
    node = tag("a", attributes={"href": "/path", "class": "link", "data-id": "123"})
    assert generate([node]) == '<a href="/path" class="link" data-id="123"></a>'


def test_boolean_attributes():
    node = tag("input", attributes={"checked": "", "disabled": "disabled", "type": "checkbox"})
    assert generate([node]) == '<input checked disabled type="checkbox"></input>'


def test_double_quotes_are_escaped_in_values():
    node = tag("div", attributes={"title": 'say "hi"'})
    assert generate([node]) == '<div title="say &quot;hi&quot;"></div>'


def test_top_level_code():
    assert generate([expr("@user.name")]) == "<%= @user.name %>"
    assert generate([stmt("if logged_in?")]) == "<% if logged_in? %>"


def test_text_is_emitted_raw():
    assert generate([text('This & that < > " \'', 2)]) == '  This & that < > " \''


def test_comments():
    assert generate([comment("This is a comment")]) == "<%# This is a comment %>"
    silent = GeneratorOptions(emit_comments=False)
    assert generate([comment("This is a comment")], silent) == ""


def test_html_comment_is_always_emitted():
    silent = GeneratorOptions(emit_comments=False)
    assert generate([comment("! Visible")], silent) == "<!-- Visible -->"


@pytest.mark.parametrize("content, expected", [
    ("doctype html", "<!DOCTYPE html>"),
    ("!!! 5", "<!DOCTYPE html>"),
    ("doctype xml", "<!DOCTYPE doctype xml>"),
])
def test_doctype(content, expected):
    assert generate([Node(NodeKind.DOCTYPE, 0, content=content)]) == expected


def test_nested_block_closes_after_children():
    nodes = [tag("div"), tag("p", 2, child=text("Hello"))]
    assert generate(nodes) == "<div>\n  <p>Hello</p>\n</div>"


def test_custom_indent_size_scales_depth():
    nodes = [tag("div"), tag("p", 2, child=text("Hello"))]
    result = ErbGenerator(GeneratorOptions(indent_size=4)).generate(nodes)
    assert result == "<div>\n        <p>Hello</p>\n</div>"


def test_sibling_at_same_depth_closes_block():
    nodes = [tag("ul"), tag("li", 2, child=text("a")), tag("p")]
    assert generate(nodes) == "<ul>\n  <li>a</li>\n</ul>\n<p></p>"


def test_tag_with_inline_child_never_opens_block():
    nodes = [tag("p", child=text("Hello")), tag("span", 2)]
    assert generate(nodes) == "<p>Hello</p>\n  <span></span>"


def test_statement_block_gets_end():
    nodes = [stmt("@items.each do |item|"), tag("li", 2, child=expr("item.name"))]
    assert generate(nodes) == "<% @items.each do |item| %>\n  <li><%= item.name %></li>\n<% end %>"


def test_block_expression_gets_end():
    nodes = [expr("form_for @user do |f|"), expr("f.text_field :name", 2)]
    assert generate(nodes) == "<%= form_for @user do |f| %>\n  <%= f.text_field :name %>\n<% end %>"


def test_expression_without_block_body_is_not_pushed():
    assert generate([expr("form_for @user do |f|"), expr("x")]) == "<%= form_for @user do |f| %>\n<%= x %>"
    assert generate([expr("render \"do\""), expr("x", 2)]) == "<%= render \"do\" %>\n  <%= x %>"


def test_else_continues_if_block():
    nodes = [
        stmt("if @user"), tag("p", 2, child=text("Hi")),
        stmt("else"), tag("p", 2, child=text("Bye")),
    ]
    assert generate(nodes) == (
        "<% if @user %>\n"
        "  <p>Hi</p>\n"
        "<% else %>\n"
        "  <p>Bye</p>\n"
        "<% end %>"
    )


def test_empty_else_still_closes_the_block():
    nodes = [stmt("if @user"), tag("p", 2, child=text("Hi")), stmt("else"), tag("footer")]
    assert generate(nodes) == (
        "<% if @user %>\n"
        "  <p>Hi</p>\n"
        "<% else %>\n"
        "<% end %>\n"
        "<footer></footer>"
    )


def test_statement_without_body_is_not_a_block():
    nodes = [stmt("title = 'x'"), tag("p")]
    assert generate(nodes) == "<% title = 'x' %>\n<p></p>"


def test_close_statements_disabled():
    nodes = [stmt("if x"), tag("p", 2, child=text("y"))]
    options = GeneratorOptions(close_statements=False)
    assert generate(nodes, options) == "<% if x %>\n  <p>y</p>"


def test_void_elements_option():
    node = tag("img", attributes={"src": "/a.png"})
    assert generate([node]) == '<img src="/a.png"></img>'
    assert generate([node], GeneratorOptions(void_elements=True)) == '<img src="/a.png">'


def test_unknown_inline_child_falls_back_to_empty_element():
    node = tag("div", child=Node(NodeKind.COMMENT, 0, content="x"))
    assert generate([node]) == "<div></div>"


@pytest.mark.parametrize("size", [0, -2, True, "2"])
def test_invalid_indent_size_is_rejected(size):
    with pytest.raises(ConfigurationError):
        ErbGenerator(GeneratorOptions(indent_size=size))


def test_generator_state_resets_between_calls():
    generator = ErbGenerator()
    first = generator.generate([tag("div"), tag("p", 2)])
    second = generator.generate([tag("span")])
    assert first == "<div>\n  <p></p>\n</div>"
    assert second == "<span></span>"


def test_generator_does_not_mutate_nodes():
    nodes = [tag("div", attributes={"class": "a"}), tag("p", 2, child=text("x"))]
    snapshot = [(n.kind, n.indent_depth, dict(n.attributes), len(n.children)) for n in nodes]
    generate(nodes)
    assert [(n.kind, n.indent_depth, dict(n.attributes), len(n.children)) for n in nodes] == snapshot
