"""
Event Filters
=============

Selection predicate applied to a buffer snapshot before evaluation:

    (event.dimension in dimensions) and (event.risk_level in risk_levels)

The estimator is filter-agnostic and only sees the selected subset.
"""

from typing import FrozenSet, Iterable, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from risk_heatmap.models.event import AbnormalDimension, Event, RiskLevel


DEFAULT_RISK_LEVELS = frozenset({RiskLevel.CRITICAL, RiskLevel.HIGH, RiskLevel.MEDIUM})


class EventFilter(BaseModel):
    """
    Dimension and risk-level selection.

    Defaults select every dimension and CRITICAL/HIGH/MEDIUM risk.
    An empty selection matches nothing.
    """

    dimensions: FrozenSet[AbnormalDimension] = Field(
        default_factory=lambda: frozenset(AbnormalDimension),
        description="Selected behavioral dimensions",
    )
    risk_levels: FrozenSet[RiskLevel] = Field(
        default_factory=lambda: DEFAULT_RISK_LEVELS,
        description="Selected risk levels",
    )

    @classmethod
    def from_query(
        cls,
        dimensions: Optional[Iterable[str]] = None,
        risk_levels: Optional[Iterable[str]] = None,
    ) -> "EventFilter":
        """Build a filter from query parameters; None keeps the default."""
        data = {}
        if dimensions is not None:
            data["dimensions"] = frozenset(dimensions)
        if risk_levels is not None:
            data["risk_levels"] = frozenset(risk_levels)
        return cls.model_validate(data)

    def matches(self, event: Event) -> bool:
        return event.dimension in self.dimensions and event.risk_level in self.risk_levels

    def apply(self, events: Sequence[Event]) -> Tuple[Event, ...]:
        """Selected events, order preserved."""
        return tuple(e for e in events if self.matches(e))
