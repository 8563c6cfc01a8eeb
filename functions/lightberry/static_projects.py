"""
Static fallback projects shown when the hosted store is unavailable.
"""

from __future__ import annotations

from datetime import datetime, timezone

from lightberry.db import ProjectRecord


def _placeholder(text: str) -> str:
    return f"/placeholder.svg?height=200&width=300&text={text}"


STATIC_PROJECTS: tuple[ProjectRecord, ...] = (
    ProjectRecord(
        id="1",
        title="Neural Canvas",
        description=(
            "AI-powered drawing tool that transforms sketches into digital art "
            "using machine learning algorithms."
        ),
        image_url=_placeholder("Neural+Canvas"),
        visit_url="https://example.com/neural-canvas",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    ),
    ProjectRecord(
        id="2",
        title="Quantum Todo",
        description=(
            "Task management app with probabilistic scheduling and "
            "uncertainty-based priority systems."
        ),
        image_url=_placeholder("Quantum+Todo"),
        visit_url="https://example.com/quantum-todo",
        created_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
    ),
    ProjectRecord(
        id="3",
        title="Syntax Poetry",
        description=(
            "Code-to-poetry generator that converts programming syntax into "
            "readable verse and artistic expressions."
        ),
        image_url=_placeholder("Syntax+Poetry"),
        visit_url="https://example.com/syntax-poetry",
        created_at=datetime(2024, 1, 3, tzinfo=timezone.utc),
    ),
    ProjectRecord(
        id="4",
        title="Memory Palace VR",
        description=(
            "Virtual reality memory training application using spatial "
            "mnemonics and 3D environments."
        ),
        image_url=_placeholder("Memory+Palace+VR"),
        visit_url="https://example.com/memory-palace",
        created_at=datetime(2024, 1, 4, tzinfo=timezone.utc),
    ),
    ProjectRecord(
        id="5",
        title="Chaos Calculator",
        description=(
            "Mathematical visualization tool for exploring fractal patterns "
            "and chaotic systems in real-time."
        ),
        image_url=_placeholder("Chaos+Calculator"),
        visit_url="https://example.com/chaos-calculator",
        created_at=datetime(2024, 1, 5, tzinfo=timezone.utc),
    ),
)


def static_projects() -> list[ProjectRecord]:
    """Return fresh copies so callers can't mutate the module-level seed."""
    return [project.copy() for project in STATIC_PROJECTS]
