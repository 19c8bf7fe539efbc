from __future__ import annotations

from page_mirror.extract import (
    document_base_url,
    extract_markup_references,
    extract_stylesheet_references,
)
from page_mirror.urls import resolve_url

PAGE = """<!doctype html>
<html>
<head>
  <link rel="stylesheet" href="css/site.css">
  <link rel="icon" href="favicon.ico">
  <script src="js/app.js"></script>
  <script>var inline = true;</script>
</head>
<body>
  <a href="#section">jump</a>
  <a href="javascript:void(0)">noop</a>
  <a href="JavaScript:alert(1)">alert</a>
  <a href="about.html">about</a>
  <img src="">
  <img src="data:image/png;base64,AAAA">
  <img src="img/hero.jpg">
  <embed src="media/clip.swf" href="ignored.html">
  <div>no refs here</div>
</body>
</html>
"""


def test_markup_references():
    assert extract_markup_references(PAGE) == {
        "css/site.css",
        "favicon.ico",
        "js/app.js",
        "about.html",
        "img/hero.jpg",
        "media/clip.swf",
    }


def test_markup_exclusions_never_returned():
    refs = extract_markup_references(PAGE)
    assert "#section" not in refs
    assert "javascript:void(0)" not in refs
    assert "data:image/png;base64,AAAA" not in refs
    assert "" not in refs


def test_markup_duplicates_collapse():
    html = '<img src="a.png"><img src="a.png"><link rel="stylesheet" href="a.png">'
    assert extract_markup_references(html) == {"a.png"}


def test_document_base_url_honours_base_element():
    html = '<head><base href="/static/"></head><img src="x.png">'
    base = document_base_url(html, "https://x.com/page/index.html")
    assert base == "https://x.com/static/"
    assert resolve_url(base, "x.png") == "https://x.com/static/x.png"


def test_document_base_url_defaults_to_page():
    assert document_base_url("<p>hi</p>", "https://x.com/a/") == "https://x.com/a/"


def test_stylesheet_import_and_url():
    css = '@import "other.css"; .x { background: url(img/logo.png); }'
    refs = extract_stylesheet_references(css)
    assert refs == {"other.css", "img/logo.png"}

    base = "https://x.com/css/style.css"
    assert {resolve_url(base, r) for r in refs} == {
        "https://x.com/css/other.css",
        "https://x.com/css/img/logo.png",
    }


def test_stylesheet_quoting_variants():
    css = """
    @font-face { src: url('fonts/a.woff2') format('woff2'),
                      url( "fonts/a.woff" ) format('woff'); }
    .b { background-image: url(  img/b.png  ); }
    @import url("print.css") print;
    @import url(theme.css);
    @import 'bare-quoted.css';
    @import plain.css;
    """
    assert extract_stylesheet_references(css) == {
        "fonts/a.woff2",
        "fonts/a.woff",
        "img/b.png",
        "print.css",
        "theme.css",
        "bare-quoted.css",
        "plain.css",
    }


def test_stylesheet_data_uris_skipped():
    css = (
        '.a { background: url("data:image/png;base64,AAAA"); }'
        ".b { background: url(DATA:image/gif;base64,R0lG); }"
        ".c { background: url(); }"
    )
    assert extract_stylesheet_references(css) == set()
