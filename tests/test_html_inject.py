"""Tests for warble.html_inject — fragment placement in rendered documents."""

from warble.html_inject import Injection, inject_component_html, inject_html, inject_multiple

DOC = "<html><head><title>T</title></head><body><div id=\"app\"></div></body></html>"


class TestInjectMeta:
    def test_after_existing_meta(self) -> None:
        html = '<html><head><meta charset="utf-8"></head><body></body></html>'
        result = inject_html(html, '<meta name="x">', type="meta", in_head=True)
        assert '<meta charset="utf-8">\n  <meta name="x"></head>' in result

    def test_reuses_existing_newline(self) -> None:
        html = '<html><head>\n  <meta charset="utf-8">\n</head></html>'
        result = inject_html(html, '<meta name="x">', type="meta", in_head=True)
        assert result == '<html><head>\n  <meta charset="utf-8">\n<meta name="x">\n</head></html>'

    def test_last_meta_is_the_anchor(self) -> None:
        html = '<head><meta a><title>T</title><meta b></head>'
        result = inject_html(html, "<meta c>", type="meta", in_head=True)
        assert "<meta b>\n  <meta c></head>" in result

    def test_before_head_close_without_meta(self) -> None:
        result = inject_html(DOC, '<meta name="x">', type="meta", in_head=True)
        assert '<title>T</title>\n  <meta name="x">\n</head>' in result

    def test_after_head_open_without_close(self) -> None:
        result = inject_html('<head lang="en"><title>T</title>', "<meta x>", in_head=True)
        assert result == '<head lang="en">\n  <meta x>\n<title>T</title>'

    def test_prepended_without_head(self) -> None:
        assert inject_html("<p>x</p>", "<meta x>", type="meta", in_head=True) == "<meta x>\n<p>x</p>"

    def test_body_meta_ignored(self) -> None:
        html = "<html><head></head><body><meta itemprop=x></body></html>"
        result = inject_html(html, "<meta new>", type="meta", in_head=True)
        assert result.index("<meta new>") < result.index("</head>")


class TestInjectScripts:
    def test_data_script_after_head_script(self) -> None:
        html = '<html><head><script src="/a.js"></script><title>T</title></head><body></body></html>'
        result = inject_html(html, "<script>D</script>", type="data-script", in_head=True)
        assert '<script src="/a.js"></script>\n  <script>D</script><title>' in result

    def test_body_script_after_last_body_script(self) -> None:
        html = '<html><body><script src="/1.js"></script><p>x</p></body></html>'
        result = inject_html(html, '<script src="/2.js"></script>', type="script")
        assert '<script src="/1.js"></script>\n  <script src="/2.js"></script><p>x</p>' in result

    def test_head_scripts_do_not_anchor_body_scripts(self) -> None:
        html = '<html><head><script src="/h.js"></script></head><body><p>x</p></body></html>'
        result = inject_html(html, '<script src="/b.js"></script>', type="script")
        assert result.index('src="/b.js"') > result.index("<body>")
        assert '<p>x</p>\n  <script src="/b.js"></script>\n</body>' in result

    def test_appended_without_body(self) -> None:
        result = inject_html("<p>x</p>", "<script></script>", type="script")
        assert result == "<p>x</p>\n<script></script>"


class TestInjectHtmlGeneral:
    def test_custom_position_replaced_once(self) -> None:
        html = "<head><!--here--></head><!--here-->"
        result = inject_html(html, "X", type="meta", in_head=True, custom_position="<!--here-->")
        assert result == "<head>X</head><!--here-->"

    def test_missing_custom_position_falls_through(self) -> None:
        result = inject_html(DOC, "X", custom_position="<!--nope-->")
        assert "X\n</body>" in result

    def test_empty_content_unchanged(self) -> None:
        assert inject_html(DOC, "", type="meta", in_head=True) == DOC

    def test_case_insensitive_tags(self) -> None:
        result = inject_html("<HTML><HEAD></HEAD><BODY></BODY></HTML>", "X", in_head=True)
        assert result == "<HTML><HEAD>\n  X\n</HEAD><BODY></BODY></HTML>"


class TestInjectMultiple:
    def test_same_types_cluster(self) -> None:
        result = inject_multiple(DOC, [
            Injection('<meta name="a">', type="meta", in_head=True),
            Injection("<script>D</script>", type="data-script", in_head=True),
            Injection('<script src="/1.js"></script>', type="script"),
            Injection('<script src="/2.js"></script>', type="script"),
        ])
        positions = [
            result.index('<meta name="a">'),
            result.index("<script>D</script>"),
            result.index("</head>"),
            result.index('<div id="app">'),
            result.index('src="/1.js"'),
            result.index('src="/2.js"'),
            result.index("</body>"),
        ]
        assert positions == sorted(positions)
        assert '<script src="/1.js"></script>\n<script src="/2.js"></script>' in result

    def test_skips_empty(self) -> None:
        assert inject_multiple(DOC, [Injection(""), Injection("", type="script")]) == DOC


class TestInjectComponentHtml:
    def test_no_template(self) -> None:
        assert inject_component_html(None, "<p>x</p>") == "<p>x</p>"

    def test_outlet_marker(self) -> None:
        template = "<body><main><!--ssr-outlet--></main></body>"
        assert inject_component_html(template, "<p>x</p>") == "<body><main><p>x</p></main></body>"

    def test_replaces_body_contents(self) -> None:
        template = '<html><body class="b">old</body></html>'
        assert inject_component_html(template, "M") == '<html><body class="b">\n  M\n</body></html>'

    def test_only_body_close(self) -> None:
        assert inject_component_html("<div></body>", "M") == "<div>\n  M\n</body>"

    def test_no_markers(self) -> None:
        assert inject_component_html("<div></div>", "M") == "M"
