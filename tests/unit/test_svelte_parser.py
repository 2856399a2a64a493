"""
Svelte Template Parser Tests

Mapping of the tree-sitter markup tree onto template nodes, dialects and
error reporting.
"""

import pytest

from svelte_unsafe_html.exceptions import TemplateParseError
from svelte_unsafe_html.models import Position
from svelte_unsafe_html.template.nodes import NodeKind, to_dict
from svelte_unsafe_html.template.svelte_parser import SvelteTemplateParser, _legacy_markup, create_svelte_parser


def kinds(fragment):
    return [child.kind for child in fragment.children]


class TestParserBasics:
    def test_parser_initialization(self, parser):
        assert parser.supported_extensions == [".svelte"]
        assert parser.engine_name == "svelte"

    def test_factory(self):
        assert isinstance(create_svelte_parser(), SvelteTemplateParser)

    def test_empty_source(self, parser):
        ast = parser.parse("", "Empty.svelte")

        assert ast.fragment.children == ()
        assert ast.instance is None

    def test_raw_html_inside_element(self, parser):
        ast = parser.parse("<div>{@html userInput}</div>", "App.svelte")

        div = ast.fragment.children[0]
        assert div.kind is NodeKind.ELEMENT
        assert div.name == "div"
        assert (div.start, div.end) == (0, 28)

        raw = div.fragment.children[0]
        assert raw.kind is NodeKind.RAW_HTML
        assert (raw.start, raw.end) == (5, 22)
        assert raw.expression.name == "userInput"

    def test_text_entities_are_decoded(self, parser):
        text = parser.parse("a &amp; b", "App.svelte").fragment.children[0]

        assert text.raw == "a &amp; b"
        assert text.data == "a & b"
        assert not text.is_whitespace

    def test_whitespace_text(self, parser):
        text = parser.parse(" \n\t ", "App.svelte").fragment.children[0]

        assert text.is_whitespace

    def test_comment_ignores(self, parser):
        source = "<!-- svelte-ignore unsafe_html -->\n{@html x}"

        ast = parser.parse(source, "App.svelte")

        assert kinds(ast.fragment) == [NodeKind.COMMENT, NodeKind.TEXT, NodeKind.RAW_HTML]
        comment = ast.fragment.children[0]
        assert comment.data == " svelte-ignore unsafe_html "
        assert comment.ignores == {"unsafe_html"}

    def test_offsets_are_characters_not_bytes(self, parser):
        source = "<p>café</p>{@html x}"

        raw = parser.parse(source, "App.svelte").fragment.children[1]

        assert (raw.start, raw.end) == (11, 20)
        assert source[raw.start : raw.end] == "{@html x}"

    def test_to_dict(self, parser):
        data = to_dict(parser.parse("<p>{@html x}</p>", "App.svelte"))

        assert data["source"] == "App.svelte"
        paragraph = data["fragment"]["children"][0]
        assert paragraph["type"] == "Element"
        assert paragraph["fragment"]["children"][0]["type"] == "RawMustacheTag"


class TestScriptAndStyle:
    def test_top_level_blocks_are_lifted(self, parser):
        source = "<script>let x = 1;</script>\n<div>{x}</div>\n<style>div { color: red; }</style>"

        ast = parser.parse(source, "App.svelte")

        assert kinds(ast.fragment) == [NodeKind.TEXT, NodeKind.ELEMENT, NodeKind.TEXT]
        assert ast.instance.content == "let x = 1;"
        assert ast.instance.context == "default"
        assert ast.css.content == "div { color: red; }"

    def test_module_script(self, parser):
        source = '<script context="module">export const prerender = true;</script><script>let a;</script>'

        ast = parser.parse(source, "App.svelte")

        assert ast.module.content == "export const prerender = true;"
        assert ast.instance.content == "let a;"

    def test_typescript_component(self, parser):
        source = '<script lang="ts">let html: string = "";</script>{@html html as string}'

        ast = parser.parse(source, "App.svelte")

        assert ast.instance.lang == "ts"
        assert ast.fragment.children[0].expression.type == "as_expression"

    def test_nested_script_is_raw_text_element(self, parser):
        source = "<div><script>window.x = '<b>{y}</b>';</script></div>"

        div = parser.parse(source, "App.svelte").fragment.children[0]
        script = div.fragment.children[0]

        assert script.kind is NodeKind.ELEMENT
        assert script.name == "script"
        assert script.fragment.children[0].raw == "window.x = '<b>{y}</b>';"


class TestElements:
    def test_void_self_closing_and_components(self, parser):
        ast = parser.parse('<br><img src="a.png" /><Foo />', "App.svelte")

        assert kinds(ast.fragment) == [NodeKind.ELEMENT, NodeKind.ELEMENT, NodeKind.COMPONENT]
        assert ast.fragment.children[1].attributes[0].value == '"a.png"'
        assert ast.fragment.children[2].name == "Foo"
        assert ast.fragment.children[2].fragment.children == ()

    def test_attributes(self, parser):
        source = '<a href="/x?{q}" class=big {id} {...rest} on:click={() => go(1)} disabled>t</a>'

        anchor = parser.parse(source, "App.svelte").fragment.children[0]

        assert [(a.name, a.value) for a in anchor.attributes] == [
            ("href", '"/x?{q}"'),
            ("class", "big"),
            ("{id}", None),
            ("{...rest}", None),
            ("on:click", "{() => go(1)}"),
            ("disabled", None),
        ]
        assert anchor.fragment.children[0].data == "t"


class TestBlocks:
    def test_if_else_if_else(self, parser):
        block = parser.parse("{#if a}A{:else if b}B{:else}C{/if}", "App.svelte").fragment.children[0]

        assert block.kind is NodeKind.IF_BLOCK
        assert block.test.name == "a"
        assert block.consequent.children[0].data == "A"

        nested = block.alternate.children[0]
        assert nested.kind is NodeKind.IF_BLOCK
        assert nested.elseif
        assert nested.test.name == "b"
        assert nested.consequent.children[0].data == "B"
        assert nested.alternate.children[0].data == "C"

    def test_each_with_index_key_and_fallback(self, parser):
        source = "{#each items as item, i (item.id)}{item}{:else}none{/each}"

        block = parser.parse(source, "App.svelte").fragment.children[0]

        assert block.kind is NodeKind.EACH_BLOCK
        assert block.expression.name == "items"
        assert block.context == "item"
        assert block.index == "i"
        assert block.key.text == "item.id"
        assert kinds(block.body) == [NodeKind.MUSTACHE]
        assert block.fallback.children[0].data == "none"

    def test_each_destructuring(self, parser):
        block = parser.parse("{#each pairs as [a, b]}{a}{/each}", "App.svelte").fragment.children[0]

        assert block.context == "[a, b]"
        assert block.index is None
        assert block.fallback is None

    def test_whitespace_and_comments_between_siblings(self, parser):
        source = "{#each items as item}\n  <p>{item}</p>\n{:else}\n  <!-- none -->\n{/each}"

        block = parser.parse(source, "App.svelte").fragment.children[0]

        assert kinds(block.body) == [NodeKind.TEXT, NodeKind.ELEMENT, NodeKind.TEXT]
        assert block.body.children[0].raw == "\n  "
        assert block.body.children[0].is_whitespace
        assert kinds(block.fallback) == [NodeKind.TEXT, NodeKind.COMMENT, NodeKind.TEXT]
        assert block.fallback.children[1].data == " none "
        assert (block.fallback.start, block.fallback.end) == (45, 62)

    def test_await_branches(self, parser):
        source = "{#await promise}wait{:then value}{value}{:catch error}{error}{/await}"

        block = parser.parse(source, "App.svelte").fragment.children[0]

        assert block.kind is NodeKind.AWAIT_BLOCK
        assert block.value == "value"
        assert block.error == "error"
        assert block.pending.children[0].data == "wait"
        assert [f.start for f in block.fragments()] == [16, 33, 54]

    def test_key_block(self, parser):
        block = parser.parse("{#key id}<p>{id}</p>{/key}", "App.svelte").fragment.children[0]

        assert block.kind is NodeKind.KEY_BLOCK
        assert block.expression.name == "id"

    def test_nested_blocks_keep_their_own_branches(self, parser):
        source = "{#if a}{#if b}B{:else}notB{/if}{:else}notA{/if}"

        outer = parser.parse(source, "App.svelte").fragment.children[0]

        inner = outer.consequent.children[0]
        assert inner.kind is NodeKind.IF_BLOCK
        assert inner.alternate.children[0].data == "notB"
        assert outer.alternate.children[0].data == "notA"

    def test_const_and_debug_tags(self, parser):
        source = "{#each items as item}{@const total = item.a + item.b}{@debug item, total}{/each}"

        block = parser.parse(source, "App.svelte").fragment.children[0]

        const, debug = block.body.children
        assert const.kind is NodeKind.CONST_TAG
        assert debug.identifiers == ("item", "total")


class TestModernDialect:
    def test_snippet_and_render(self, parser):
        source = "{#snippet row(item)}<td>{@html item}</td>{/snippet}{@render row(x)}"

        ast = parser.parse(source, "App.svelte", modern=True)

        snippet, render = ast.fragment.children
        assert snippet.kind is NodeKind.SNIPPET_BLOCK
        assert snippet.name == "row"
        assert snippet.parameters == "item"
        assert render.kind is NodeKind.RENDER_TAG
        assert ast.modern

    def test_each_without_as(self, parser):
        block = parser.parse("{#each items}<p>x</p>{/each}", "App.svelte", modern=True).fragment.children[0]

        assert block.context is None
        assert block.expression.name == "items"

    def test_legacy_rejects_snippet(self, parser):
        with pytest.raises(TemplateParseError) as exc_info:
            parser.parse("{#snippet row(item)}{item}{/snippet}", "App.svelte")

        assert exc_info.value.code == "expected-block-type"

    def test_legacy_rejects_render(self, parser):
        with pytest.raises(TemplateParseError) as exc_info:
            parser.parse("{@render row(x)}", "App.svelte")

        assert exc_info.value.code == "unknown-tag"

    def test_render_requires_call(self, parser):
        with pytest.raises(TemplateParseError) as exc_info:
            parser.parse("{@render row}", "App.svelte", modern=True)

        assert exc_info.value.code == "invalid-render-expression"


class TestLegacyMarkup:
    def test_rewrites_keep_length(self):
        source = "{#snippet a(x)}{@render a(1)}{/snippet}{#each xs}{@const y = 1}{/each}{@html z}"

        rewritten = _legacy_markup(source)

        assert len(rewritten) == len(source)
        assert "snippet" not in rewritten
        assert "render" not in rewritten
        assert "each" not in rewritten
        assert rewritten.endswith("{@html z}")

    def test_each_with_as_is_kept(self):
        source = "{#each xs as x}{#each x}{/each}{/each}"

        assert _legacy_markup(source) == "{#each xs as x}{#if   x}{/if  }{/each}"

    def test_comments_and_scripts_are_untouched(self):
        source = "<!-- {@render a()} --><script>const s = '{@const x}';</script>"

        assert _legacy_markup(source) == source


class TestParseErrors:
    @pytest.mark.parametrize(
        "source, code",
        [
            ("<div>{@html x}", "invalid-syntax"),
            ("{#if a}<p>{@html x}</p>", "invalid-syntax"),
            ("{#each items}{/each}", "expected-as"),
            ("{@html a +}", "invalid-expression"),
            ("{@const a}", "invalid-const"),
            ("{@debug a.b}", "invalid-debug-args"),
            ("<script>a</script><script>b</script>", "script-duplicate"),
            ("<style></style><style></style>", "style-duplicate"),
            ("<script>let = = 1</script>", "invalid-script"),
        ],
    )
    def test_error_codes(self, parser, source, code):
        with pytest.raises(TemplateParseError) as exc_info:
            parser.parse(source, "Broken.svelte")

        assert exc_info.value.code == code
        assert exc_info.value.filename == "Broken.svelte"

    def test_error_position(self, parser):
        with pytest.raises(TemplateParseError) as exc_info:
            parser.parse("<div>\n  {@html a +}\n</div>", "Broken.svelte")

        error = exc_info.value
        assert error.position == Position(2, 9)
        assert error.offset == 15
        assert "Broken.svelte:2:9" in str(error)

    def test_syntax_error_has_position(self, parser):
        with pytest.raises(TemplateParseError) as exc_info:
            parser.parse("<div>{@html x}", "Broken.svelte")

        assert exc_info.value.position is not None
        assert exc_info.value.position.line == 1

    def test_error_to_dict(self, parser):
        with pytest.raises(TemplateParseError) as exc_info:
            parser.parse("{@const a}", "Broken.svelte")

        assert exc_info.value.to_dict() == {
            "code": "invalid-const",
            "message": "{@const ...} must be an assignment",
            "start": {"line": 1, "column": 0},
            "pos": 0,
        }
