"""Diagram writers for compiled job edges."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, TextIO

from .models import Edge


def render_plantuml(edges: Iterable[Edge], sink: TextIO) -> None:
    """Write a PlantUML use-case diagram. Names are not escaped."""
    sink.write("@startuml\n")
    for edge in edges:
        sink.write(f"({edge.src}) --> ({edge.dst})\n")
    sink.write("@enduml\n")


def render_dot(edges: Iterable[Edge], sink: TextIO) -> None:
    lines = ["digraph JobGraph {", "  rankdir=LR;"]
    for edge in edges:
        lines.append(f'  "{_esc(edge.src)}" -> "{_esc(edge.dst)}";')
    lines.append("}")
    sink.write("\n".join(lines) + "\n")


def _esc(text: str) -> str:
    return text.replace('"', '\\"')


RENDERERS: Dict[str, Callable[[Iterable[Edge], TextIO], None]] = {
    "plantuml": render_plantuml,
    "dot": render_dot,
}
