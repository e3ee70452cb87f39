"""
Tests for the sandboxed preview renderer.
"""

import html

from webber.models import GeneratedSite
from webber.rendering.preview import (
    PreviewRenderer,
    build_preview_document,
    sandboxed_iframe,
)

SITE = GeneratedSite(
    html='<div class="card">Hello</div>',
    css=".card { color: #005461; }",
    js="document.title = 'generated';",
)


def test_document_layout():
    document = build_preview_document(SITE)

    head, body = document.split("<body>")
    assert "<style>.card { color: #005461; }</style>" in head
    assert SITE.html in body
    assert "<script>document.title = 'generated';</script>" in body
    assert body.index(SITE.html) < body.index("<script>")


def test_same_site_renders_same_document():
    renderer = PreviewRenderer()
    first = renderer.open(SITE)
    second = renderer.open(SITE)
    assert first == second == renderer.document


def test_open_replaces_previous_site():
    renderer = PreviewRenderer()
    renderer.open(SITE)

    other = GeneratedSite(html="<p>Other</p>", css="", js="")
    renderer.open(other)

    assert renderer.site == other
    assert "Other" in renderer.document
    assert "Hello" not in renderer.document


def test_close_unloads_and_is_idempotent():
    renderer = PreviewRenderer()
    renderer.close()
    assert not renderer.is_open

    renderer.open(SITE)
    renderer.close()
    renderer.close()
    assert renderer.site is None
    assert renderer.document is None
    assert renderer.iframe_html() is None


def test_iframe_is_isolated_from_host():
    frame = sandboxed_iframe(build_preview_document(SITE), height=400)

    assert 'sandbox="allow-scripts"' in frame
    assert "allow-same-origin" not in frame
    assert "height: 400px" in frame


def test_iframe_srcdoc_is_escaped():
    renderer = PreviewRenderer()
    renderer.open(SITE)
    frame = renderer.iframe_html()

    srcdoc = frame.split('srcdoc="', 1)[1].rsplit('"></iframe>', 1)[0]
    assert "<" not in srcdoc and '"' not in srcdoc
    assert html.unescape(srcdoc) == renderer.document
