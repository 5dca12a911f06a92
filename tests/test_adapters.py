"""Tests for warble.adapters — registry, element renderer, and kida templates."""

from types import SimpleNamespace

import pytest
from kida import DictLoader, Environment

from warble.adapters import available_engines, load_adapter, register_adapter, unregister_adapter
from warble.adapters.elements import HTMLAdapter, h, render_attrs, render_to_string
from warble.adapters.templates import KidaAdapter
from warble.config import RenderOptions
from warble.errors import ConfigurationError
from warble.types import AdapterResult, LayoutEntry


def Layout(children):
    return f'<div class="layout">{children}</div>'


def Page(name="World"):
    return f"<h1>Hello, {name}</h1>"


class TestRegistry:
    def test_builtins_load_lazily(self) -> None:
        assert isinstance(load_adapter("html"), HTMLAdapter)
        assert isinstance(load_adapter("kida"), KidaAdapter)
        assert load_adapter("html") is load_adapter("html")

    def test_unknown_engine(self) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported engine: 'vue'"):
            load_adapter("vue")

    def test_register_custom(self) -> None:
        class Custom:
            engine = "custom-test"

            async def render_ssr(self, options: RenderOptions) -> AdapterResult:
                return AdapterResult(html="custom")

        adapter = Custom()
        register_adapter(adapter)
        try:
            assert load_adapter("custom-test") is adapter
            assert "custom-test" in available_engines()
        finally:
            unregister_adapter("custom-test")
        with pytest.raises(ConfigurationError):
            load_adapter("custom-test")

    def test_register_requires_engine_name(self) -> None:
        with pytest.raises(ConfigurationError):
            register_adapter(object())


class TestRenderToString:
    async def test_tag_with_attrs_and_escaped_text(self) -> None:
        html = await render_to_string(h("p", {"class_": "x", "data_id": "7"}, "a<b"))
        assert html == '<p class="x" data-id="7">a&lt;b</p>'

    async def test_void_element(self) -> None:
        assert await render_to_string(h("br")) == "<br>"

    async def test_component_output_is_trusted(self) -> None:
        assert await render_to_string(h(Page, {"name": "Ada"})) == "<h1>Hello, Ada</h1>"

    async def test_async_component(self) -> None:
        async def Greeting(name):
            return f"<b>{name}</b>"

        assert await render_to_string(h(Greeting, {"name": "x"})) == "<b>x</b>"

    async def test_component_returning_elements(self) -> None:
        def List(items):
            return h("ul", None, *[h("li", None, item) for item in items])

        html = await render_to_string(h(List, {"items": ["a", "<b>"]}))
        assert html == "<ul><li>a</li><li>&lt;b&gt;</li></ul>"

    async def test_children_passed_as_markup(self) -> None:
        html = await render_to_string(h(Layout, None, h("span", None, "in")))
        assert html == '<div class="layout"><span>in</span></div>'

    async def test_default_member_component(self) -> None:
        module = SimpleNamespace(default=Page)
        assert await render_to_string(h(module)) == "<h1>Hello, World</h1>"

    async def test_none_and_booleans_render_empty(self) -> None:
        assert await render_to_string([None, True, False, "x"]) == "x"

    def test_attrs_skip_false_and_none(self) -> None:
        assert render_attrs({"hidden": True, "disabled": False, "title": None}) == " hidden"


class TestHTMLAdapter:
    async def test_layout_wraps_page_inside_template(self) -> None:
        options = RenderOptions(
            engine="html",
            component=lambda: "Page",
            layouts=(LayoutEntry(Layout),),
            template="<html><head></head><body><!--ssr-outlet--></body></html>",
        )
        result = await HTMLAdapter().render_ssr(options)
        assert '<body><div class="layout">Page</div></body>' in result.html
        assert result.render_info == {"engine": "html", "layouts": 1}

    async def test_page_opting_out_of_layouts(self) -> None:
        def Bare():
            return "bare"

        Bare.inherit_layout = False
        result = await HTMLAdapter().render_ssr(
            RenderOptions(engine="html", component=Bare, layouts=(LayoutEntry(Layout),))
        )
        assert result.html == "bare"
        assert result.render_info["layouts"] == 0

    async def test_layout_props(self) -> None:
        def Titled(children, title):
            return f"<section><h2>{title}</h2>{children}</section>"

        result = await HTMLAdapter().render_ssr(
            RenderOptions(
                engine="html",
                component=Page,
                props={"name": "Ada"},
                layouts=(LayoutEntry(Titled, {"title": "Docs"}),),
            )
        )
        assert result.html == "<section><h2>Docs</h2><h1>Hello, Ada</h1></section>"


class TestKidaAdapter:
    def _env(self) -> Environment:
        return Environment(
            loader=DictLoader(
                {
                    "layout.html": '<div class="layout">{{ children }}</div>',
                    "page.html": "<h1>{{ title }}</h1>",
                }
            )
        )

    async def test_template_components(self) -> None:
        adapter = KidaAdapter(self._env())
        result = await adapter.render_ssr(
            RenderOptions(
                engine="kida",
                component="page.html",
                props={"title": "<Docs>"},
                layouts=(LayoutEntry("layout.html"),),
            )
        )
        assert result.html == '<div class="layout"><h1>&lt;Docs&gt;</h1></div>'

    async def test_mixes_with_function_components(self) -> None:
        result = await KidaAdapter().render_ssr(
            RenderOptions(
                engine="kida",
                component=Page,
                layouts=(LayoutEntry("layout.html"),),
                options={"env": self._env()},
            )
        )
        assert result.html == '<div class="layout"><h1>Hello, World</h1></div>'

    async def test_missing_environment(self) -> None:
        with pytest.raises(ConfigurationError, match="template environment"):
            await KidaAdapter().render_ssr(RenderOptions(engine="kida", component="page.html"))
