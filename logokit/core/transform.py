"""SVG cleanup and framework component generation.

Every function here is a pure string transformation.  Failures raise
``TransformError``; the untransformed input is never passed through.

SVG cleanup parses the document with ElementTree, so comments, processing
instructions, the XML declaration and the doctype are dropped by the parser
itself.  Elements and attributes from editor namespaces (Inkscape, Sodipodi,
Sketch, ...) are removed; only SVG, XLink and ``xml:`` names survive.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET

from logokit.core.catalog import Logo
from logokit.core.config import ProjectConfig
from logokit.core.errors import TransformError

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
XML_NS = "http://www.w3.org/XML/1998/namespace"
_KEPT_NAMESPACES = {SVG_NS, XLINK_NS, XML_NS}

ET.register_namespace("xlink", XLINK_NS)

_DROPPED_ELEMENTS = {"metadata"}
_PAINT_ATTRIBUTES = ("fill", "stroke")
_NON_ALNUM = re.compile(r"[^a-z0-9]")
_WORD_SPLIT = re.compile(r"[^a-zA-Z0-9]")

COMPONENT_KIND = "component"
SVG_KIND = "svg"


def _split(name: str) -> tuple[str | None, str]:
    """``{ns}local`` -> ``(ns, local)``; un-namespaced names give ``(None, name)``."""
    if name.startswith("{"):
        ns, _, local = name[1:].partition("}")
        return ns, local
    return None, name


def _is_foreign(name: str) -> bool:
    ns, _ = _split(name)
    return ns is not None and ns not in _KEPT_NAMESPACES


def _clean(element: ET.Element, color_mode: str) -> None:
    for name in [n for n in element.attrib if _is_foreign(n)]:
        del element.attrib[name]
    if color_mode == "currentColor":
        for name in _PAINT_ATTRIBUTES:
            if name in element.attrib and element.attrib[name] != "none":
                element.attrib[name] = "currentColor"
    if element.text is not None and not element.text.strip():
        element.text = None

    for child in list(element):
        if _is_foreign(child.tag) or _split(child.tag)[1] in _DROPPED_ELEMENTS:
            element.remove(child)
            continue
        if child.tail is not None and not child.tail.strip():
            child.tail = None
        _clean(child, color_mode)


def optimize_svg(svg: str, color_mode: str = "currentColor") -> str:
    """Strip editor cruft and root dimensions; optionally recolor to currentColor."""
    try:
        root = ET.fromstring(svg.lstrip("\ufeff").strip())
    except ET.ParseError as e:
        raise TransformError(f"Content is not an SVG document: {e}") from e
    ns, local = _split(root.tag)
    if local != "svg" or ns not in (None, SVG_NS):
        raise TransformError(f"Content is not an SVG document: root element is <{local}>")

    _clean(root, color_mode)
    root.attrib.pop("width", None)
    root.attrib.pop("height", None)
    try:
        return ET.tostring(
            root, encoding="unicode", default_namespace=SVG_NS if ns == SVG_NS else None
        )
    except ValueError as e:
        raise TransformError(f"Cannot serialize SVG: {e}") from e


def sanitize_file_name(title: str) -> str:
    name = _NON_ALNUM.sub("-", title.lower())
    name = re.sub(r"-+", "-", name).strip("-")
    if not name:
        raise TransformError(f"Cannot derive a file name from {title!r}")
    return name


def to_component_name(title: str) -> str:
    words = [w for w in _WORD_SPLIT.split(title) if w]
    name = "".join(w[0].upper() + w[1:].lower() for w in words)
    if not name:
        raise TransformError(f"Cannot derive a component name from {title!r}")
    if name[0].isdigit():
        name = f"Logo{name}"
    return f"{name}Logo"


def component_extension(config: ProjectConfig) -> str:
    if config.framework == "vue":
        return ".vue"
    if config.framework == "svelte":
        return ".svelte"
    if config.framework == "react":
        return ".tsx" if config.typescript else ".jsx"
    return ".svg"


def _react(name: str, svg: str, config: ProjectConfig) -> str:
    ts = config.typescript
    interface = (
        f"\ninterface {name}Props extends React.SVGProps<SVGSVGElement> {{\n"
        f"  size?: string | number\n}}\n"
        if ts else ""
    )
    props = f"props: {name}Props" if ts else "props"
    element = svg.replace("<svg", "<svg width={size} height={size} {...otherProps}", 1)
    return (
        f"import React from 'react'\n"
        f"{interface}\n"
        f"export function {name}({props}) {{\n"
        f"  const {{ size = {config.style.default_size}, ...otherProps }} = props\n\n"
        f"  return (\n"
        f"    {element}\n"
        f"  )\n"
        f"}}\n\n"
        f"export default {name}\n"
    )


def _vue(name: str, svg: str, config: ProjectConfig) -> str:
    lang = ' lang="ts"' if config.typescript else ""
    element = svg.replace("<svg", '<svg :width="size" :height="size" v-bind="$attrs"', 1)
    return (
        f"<template>\n"
        f"  {element}\n"
        f"</template>\n\n"
        f"<script{lang}>\n"
        f"import {{ defineComponent }} from 'vue'\n\n"
        f"export default defineComponent({{\n"
        f"  name: '{name}',\n"
        f"  props: {{\n"
        f"    size: {{\n"
        f"      type: [String, Number],\n"
        f"      default: {config.style.default_size}\n"
        f"    }}\n"
        f"  }}\n"
        f"}})\n"
        f"</script>\n"
    )


def _svelte(name: str, svg: str, config: ProjectConfig) -> str:
    lang = ' lang="ts"' if config.typescript else ""
    annotation = ": string | number" if config.typescript else ""
    element = svg.replace("<svg", "<svg width={size} height={size} {...$$restProps}", 1)
    return (
        f"<script{lang}>\n"
        f"  export let size{annotation} = {config.style.default_size}\n"
        f"</script>\n\n"
        f"{element}\n"
    )


_GENERATORS = {"react": _react, "vue": _vue, "svelte": _svelte}


def generate_component(logo: Logo, svg: str, config: ProjectConfig) -> str:
    """Wrap an already optimized SVG in a component for the configured framework."""
    generator = _GENERATORS.get(config.framework)
    if generator is None:
        return svg
    return generator(to_component_name(logo.title), svg, config)


def render(raw_svg: str, kind: str, logo: Logo, config: ProjectConfig) -> str:
    """Produce the final file content for one output ``kind`` (svg or component)."""
    optimized = optimize_svg(raw_svg, config.style.color_mode)
    if kind == SVG_KIND:
        return optimized
    if kind == COMPONENT_KIND:
        return generate_component(logo, optimized, config)
    raise TransformError(f"Unknown output kind: {kind}")


def output_kinds(config: ProjectConfig) -> list[str]:
    """Output kinds a job produces for the configured ``format``."""
    if config.format == SVG_KIND or config.framework == "raw":
        return [SVG_KIND]
    if config.format == "both":
        return [SVG_KIND, COMPONENT_KIND]
    return [COMPONENT_KIND]


def output_file_name(logo: Logo, kind: str, config: ProjectConfig) -> str:
    base = sanitize_file_name(logo.title)
    if kind == SVG_KIND:
        return f"{base}.svg"
    return f"{base}{component_extension(config)}"
