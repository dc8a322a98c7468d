"""Tests for SVG cleanup and component generation."""

from __future__ import annotations

import pytest

from conftest import SVG
from logokit.core.catalog import Logo
from logokit.core.config import ProjectConfig, StyleOptions
from logokit.core.errors import TransformError
from logokit.core.transform import (
    generate_component,
    optimize_svg,
    output_file_name,
    output_kinds,
    render,
    sanitize_file_name,
    to_component_name,
)

INKSCAPE_SVG = """<?xml version="1.0"?>
<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" "http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">
<svg xmlns="http://www.w3.org/2000/svg"
     xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape"
     xmlns:sodipodi="http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd"
     xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
     width="32" height="32" viewBox="0 0 32 32" inkscape:version="1.2">
  <metadata><rdf:RDF/></metadata>
  <sodipodi:namedview id="base" pagecolor="#ffffff"/>
  <g fill="none" stroke="#ff0000"><rect width="10" height="10" fill="#00ff00"/></g>
</svg>"""


def test_optimize_strips_cruft_and_root_dimensions():
    out = optimize_svg(INKSCAPE_SVG, "original")
    assert out.startswith("<svg ")
    assert "<?xml" not in out and "DOCTYPE" not in out
    assert "metadata" not in out
    assert "inkscape" not in out and "sodipodi" not in out
    assert 'viewBox="0 0 32 32"' in out
    root = out[: out.index(">") + 1]
    assert "width" not in root and "height" not in root
    # nested dimensions are kept
    assert '<rect width="10" height="10"' in out
    assert 'stroke="#ff0000"' in out


def test_optimize_current_color_keeps_none():
    out = optimize_svg(INKSCAPE_SVG, "currentColor")
    assert 'fill="none"' in out
    assert 'stroke="currentColor"' in out
    assert 'fill="currentColor"' in out
    assert "#00ff00" not in out


def test_optimize_removes_comments_and_whitespace():
    out = optimize_svg(SVG)
    assert "<!--" not in out
    assert "><path" in out
    assert out.endswith("</svg>")


@pytest.mark.parametrize(
    "content",
    [
        "",
        "<html></html>",
        "<svg viewBox='0 0 1 1'>",
        '<svg xmlns:a="urn:x"><a:b/><c:d/></svg>',
        '<x:svg xmlns:x="urn:not-svg"></x:svg>',
    ],
)
def test_optimize_rejects_non_svg(content):
    with pytest.raises(TransformError):
        optimize_svg(content)


def test_optimize_keeps_xlink_and_drops_editor_attributes():
    svg = (
        "\ufeff<svg xmlns=\"http://www.w3.org/2000/svg\" xmlns:xlink=\"http://www.w3.org/1999/xlink\"\n"
        "     xmlns:sketch=\"http://www.bohemiancoding.com/sketch/ns\" viewBox=\"0 0 8 8\">\n"
        "  <defs><path id=\"p\" d=\"M0 0h8v8H0z\" sketch:type=\"MSShapeGroup\"/></defs>\n"
        "  <use xlink:href=\"#p\" fill=\"url(#g)\" xml:space=\"preserve\"/>\n"
        "</svg>"
    )
    out = optimize_svg(svg, "original")
    assert out.startswith("<svg ")
    assert 'xlink:href="#p"' in out
    assert 'xml:space="preserve"' in out
    assert "sketch" not in out
    assert "ns0" not in out
    assert '<path id="p" d="M0 0h8v8H0z" />' in out


def test_optimize_without_namespace():
    out = optimize_svg('<svg width="4" viewBox="0 0 4 4"> <circle r="2" stroke="red"/> </svg>')
    assert out == '<svg viewBox="0 0 4 4"><circle r="2" stroke="currentColor" /></svg>'


@pytest.mark.parametrize(
    "title, file_name, component",
    [
        ("Vercel", "vercel", "VercelLogo"),
        ("Next.js", "next-js", "NextJsLogo"),
        ("  Hugging Face  ", "hugging-face", "HuggingFaceLogo"),
        ("1Password", "1password", "Logo1passwordLogo"),
    ],
)
def test_names(title, file_name, component):
    assert sanitize_file_name(title) == file_name
    assert to_component_name(title) == component


def test_names_require_alphanumerics():
    with pytest.raises(TransformError):
        sanitize_file_name("!!!")
    with pytest.raises(TransformError):
        to_component_name("---")


def test_react_component_typescript():
    config = ProjectConfig(framework="react", typescript=True, style=StyleOptions(default_size="32"))
    code = generate_component(Logo(title="Vercel"), "<svg viewBox=\"0 0 1 1\"></svg>", config)
    assert "import React from 'react'" in code
    assert "interface VercelLogoProps extends React.SVGProps<SVGSVGElement>" in code
    assert "export function VercelLogo(props: VercelLogoProps)" in code
    assert "const { size = 32, ...otherProps } = props" in code
    assert "<svg width={size} height={size} {...otherProps} viewBox" in code
    assert code.rstrip().endswith("export default VercelLogo")


def test_react_component_javascript():
    config = ProjectConfig(framework="react", typescript=False)
    code = generate_component(Logo(title="Vercel"), "<svg></svg>", config)
    assert "interface" not in code
    assert "export function VercelLogo(props)" in code


def test_vue_component():
    config = ProjectConfig(framework="vue", typescript=True)
    code = generate_component(Logo(title="Vercel"), "<svg></svg>", config)
    assert code.startswith("<template>")
    assert '<svg :width="size" :height="size" v-bind="$attrs"' in code
    assert '<script lang="ts">' in code
    assert "name: 'VercelLogo'" in code


def test_svelte_component():
    config = ProjectConfig(framework="svelte", typescript=False)
    code = generate_component(Logo(title="Vercel"), "<svg></svg>", config)
    assert code.startswith("<script>")
    assert "export let size = 24" in code
    assert "{...$$restProps}" in code


def test_render_kinds():
    config = ProjectConfig(framework="react")
    logo = Logo(title="Vercel")
    assert render(SVG, "svg", logo, config).startswith("<svg")
    assert "export function VercelLogo" in render(SVG, "component", logo, config)
    with pytest.raises(TransformError):
        render(SVG, "png", logo, config)


@pytest.mark.parametrize(
    "framework, fmt, typescript, expected",
    [
        ("react", "component", True, ["vercel.tsx"]),
        ("react", "component", False, ["vercel.jsx"]),
        ("vue", "both", True, ["vercel.svg", "vercel.vue"]),
        ("svelte", "svg", True, ["vercel.svg"]),
        ("raw", "both", False, ["vercel.svg"]),
        ("raw", "component", False, ["vercel.svg"]),
    ],
)
def test_output_files(framework, fmt, typescript, expected):
    config = ProjectConfig(framework=framework, format=fmt, typescript=typescript)
    logo = Logo(title="Vercel")
    assert [output_file_name(logo, kind, config) for kind in output_kinds(config)] == expected
