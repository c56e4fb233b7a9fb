"""Render a module graph as a Graphviz DOT document."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from nestdeps.model import ModuleData

logger = logging.getLogger(__name__)

_IMPORT_EDGE = '[label="imports"]'
_FORWARD_REF_EDGE = '[label="imports (forward ref)", style=dashed, color=red]'
_PROVIDER_EDGE = "[color=blue, style=dashed]"


def _escape_name(name: str) -> str:
    return name.replace('"', '\\"')


def _escape_label(label: str) -> str:
    return label.replace('"', '\\"').replace("\n", "\\n")


def render_dot(modules: dict[str, ModuleData]) -> str:
    """Return a ``digraph`` with one node per module plus import and provider edges."""
    lines = [
        "digraph {",
        "  rankdir=LR;",
        "  node [shape=box, style=filled, fillcolor=lightgray];",
        "",
    ]

    for name, module in modules.items():
        label = _escape_label(
            f"{name}\\n"
            f"Controllers: {len(module.controllers)}\\n"
            f"Providers: {len(module.providers)}\\n"
            f"Imports: {len(module.imports)}\\n"
            f"Entities: {module.entity_count}"
        )
        lines.append(f'  "{_escape_name(name)}" [label="{label}"];')
    lines.append("")

    for name, module in modules.items():
        for imp in module.imports:
            style = _FORWARD_REF_EDGE if imp.is_forward_reference else _IMPORT_EDGE
            lines.append(f'  "{_escape_name(name)}" -> "{_escape_name(imp.name)}" {style};')

    for module in modules.values():
        for provider in module.providers:
            for dep in provider.dependencies:
                lines.append(
                    f'  "{_escape_name(provider.name)}" -> "{_escape_name(dep)}" {_PROVIDER_EDGE};'
                )

    lines.append("}")
    return "\n".join(lines)


def write_dot(modules: dict[str, ModuleData], output_path: Path) -> Path | None:
    """Write the DOT file and, when Graphviz is installed, a PNG next to it.

    Returns the PNG path if one was rendered.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_dot(modules), encoding="utf-8", newline="\n")
    logger.info("DOT file saved to: %s", output_path)

    png_path = output_path.with_suffix(".png")
    dot_path = shutil.which("dot")
    if not dot_path:
        logger.warning(
            "Graphviz not found. To generate a PNG run: dot -Tpng %s -o %s",
            output_path,
            png_path,
        )
        return None

    result = subprocess.run(
        [dot_path, "-Tpng", str(output_path), "-o", str(png_path)],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        logger.warning("dot -Tpng failed: %s", result.stderr)
        return None

    logger.info("PNG visualization saved to: %s", png_path)
    return png_path
