"""Tests for warble.ssg — static generation and route/file helpers."""

from pathlib import Path

import pytest

from warble.config import SSGOptions
from warble.errors import StaticGenerationError
from warble.ssg import (
    expand_dynamic_route,
    file_path_to_route,
    generate_robots,
    generate_sitemap,
    render_ssg,
    route_to_file_path,
)
from warble.types import LayoutEntry

TEMPLATE = "<html><head><title>Site</title></head><body><!--ssr-outlet--></body></html>"


def Page(route, title="Untitled"):
    return f"<h1>{title}: {route}</h1>"


def Shell(children):
    return f"<main>{children}</main>"


def options(tmp_path: Path, **overrides) -> SSGOptions:
    values = {
        "engine": "html",
        "routes": ["/", "/about", "/docs/intro"],
        "output_dir": tmp_path / "dist",
        "load_route_component": lambda route: Page,
        "template": TEMPLATE,
    }
    values.update(overrides)
    return SSGOptions(**values)


class TestRoutePaths:
    @pytest.mark.parametrize(
        ("route", "path"),
        [("/", "index.html"), ("", "index.html"), ("/about", "about.html"), ("/docs/intro/", "docs/intro.html")],
    )
    def test_route_to_file_path(self, route: str, path: str) -> None:
        assert route_to_file_path(route) == path

    @pytest.mark.parametrize(
        ("path", "route"),
        [("index.html", "/"), ("about.html", "/about"), ("docs/index.html", "/docs"), ("docs\\intro.html", "/docs/intro")],
    )
    def test_file_path_to_route(self, path: str, route: str) -> None:
        assert file_path_to_route(path) == route

    def test_expand_dynamic_route(self) -> None:
        assert expand_dynamic_route("/posts/[id]", ["1", "2"]) == ["/posts/1", "/posts/2"]

    def test_static_route_unchanged(self) -> None:
        assert expand_dynamic_route("/about", ["1", "2"]) == ["/about"]


class TestSitemapAndRobots:
    def test_sitemap(self) -> None:
        xml = generate_sitemap(["/", "/about"], "https://example.com/")
        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert "<loc>https://example.com</loc>" in xml
        assert "<loc>https://example.com/about</loc>" in xml

    def test_sitemap_without_base(self) -> None:
        assert "<loc>/</loc>" in generate_sitemap(["/"])

    def test_robots(self) -> None:
        assert generate_robots() == "User-agent: *\nAllow: /"
        assert generate_robots(disallow=["/admin"]) == "User-agent: *\nDisallow: /admin"
        assert generate_robots(allow_all=False) == "User-agent: *\nDisallow: /"


class TestRenderSSG:
    async def test_writes_one_file_per_route(self, tmp_path: Path) -> None:
        seen: list[str] = []
        files = await render_ssg(options(tmp_path, on_file_generated=seen.append))

        dist = tmp_path / "dist"
        assert files == [str(dist / "index.html"), str(dist / "about.html"), str(dist / "docs" / "intro.html")]
        assert seen == files
        assert "<h1>Untitled: /about</h1>" in (dist / "about.html").read_text()
        assert "__DATA__" not in (dist / "index.html").read_text()

    async def test_route_data_and_layouts(self, tmp_path: Path) -> None:
        await render_ssg(
            options(
                tmp_path,
                routes=["/"],
                load_route_data=lambda route: {"title": "Home"},
                load_route_layouts=lambda route: [LayoutEntry(Shell)],
            )
        )
        html = (tmp_path / "dist" / "index.html").read_text()
        assert "<main><h1>Home: /</h1></main>" in html

    async def test_data_injection_and_pure_html(self, tmp_path: Path) -> None:
        await render_ssg(options(tmp_path, routes=["/"], enable_data_injection=True))
        assert "window.__DATA__" in (tmp_path / "dist" / "index.html").read_text()

        await render_ssg(options(tmp_path, routes=["/"], enable_data_injection=True, pure_html=True))
        assert "<script" not in (tmp_path / "dist" / "index.html").read_text()

    async def test_head_inject(self, tmp_path: Path) -> None:
        await render_ssg(options(tmp_path, routes=["/"], head_inject='<link rel="icon" href="/f.ico">'))
        html = (tmp_path / "dist" / "index.html").read_text()
        assert '<link rel="icon" href="/f.ico">\n</head>' in html

    async def test_sitemap_and_robots_files(self, tmp_path: Path) -> None:
        files = await render_ssg(
            options(tmp_path, generate_sitemap=True, generate_robots=True, base_url="https://example.com")
        )
        dist = tmp_path / "dist"
        assert files[-2:] == [str(dist / "sitemap.xml"), str(dist / "robots.txt")]
        assert "<loc>https://example.com/docs/intro</loc>" in (dist / "sitemap.xml").read_text()
        assert (dist / "robots.txt").read_text() == "User-agent: *\nAllow: /"

    async def test_failure_names_route(self, tmp_path: Path) -> None:
        def load(route):
            if route == "/bad":
                raise LookupError("no page")
            return Page

        with pytest.raises(StaticGenerationError, match="route: /bad") as info:
            await render_ssg(options(tmp_path, routes=["/", "/bad"], load_route_component=load))
        assert info.value.route == "/bad"
        assert isinstance(info.value.__cause__, LookupError)
        assert (tmp_path / "dist" / "index.html").exists()
