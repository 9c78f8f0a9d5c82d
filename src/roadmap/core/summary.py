"""Completion counts over a projected roadmap."""

from __future__ import annotations

from dataclasses import dataclass, field

from roadmap.core.models import Phase


@dataclass
class PhaseSummary:
    """Completion counts for one phase."""

    phase_id: str
    title: str
    total: int = 0
    completed: int = 0

    @property
    def ratio(self) -> float:
        return self.completed / self.total if self.total else 0.0


@dataclass
class RoadmapSummary:
    """Completion counts for the whole roadmap."""

    phases: list[PhaseSummary] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(p.total for p in self.phases)

    @property
    def completed(self) -> int:
        return sum(p.completed for p in self.phases)

    @property
    def ratio(self) -> float:
        return self.completed / self.total if self.total else 0.0


def summarize(phases: list[Phase]) -> RoadmapSummary:
    """Count completed subtopics per phase of a projected tree."""
    summary = RoadmapSummary()
    for phase in phases:
        item = PhaseSummary(phase_id=phase.id, title=phase.title)
        for topic in phase.topics:
            for subtopic in topic.subtopics:
                item.total += 1
                if subtopic.completed:
                    item.completed += 1
        summary.phases.append(item)
    return summary
