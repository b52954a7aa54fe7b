"""Insight templates and the in-memory registry that serves them."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

logger = logging.getLogger(__name__)

GENERIC_RECOMMENDATION = "Consult with a healthcare provider."


@dataclass(frozen=True)
class TemplateEntry:
    """Recommendation text and ordered actions for one tier."""

    recommendation: str
    actions: tuple[str, ...] = ()


@dataclass(frozen=True)
class InsightTemplate:
    """Messaging for one category: fixed copy plus one entry per tier."""

    id: str
    title: str
    category: str
    benefits: str
    fallback_recommendation: str = GENERIC_RECOMMENDATION
    tiers: Mapping[str, TemplateEntry] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tiers", MappingProxyType(dict(self.tiers)))

    def fallback_entry(self) -> TemplateEntry:
        return TemplateEntry(recommendation=self.fallback_recommendation, actions=())


class TemplateRegistry:
    """Read-only index of insight templates keyed by category id."""

    def __init__(self, templates: list[InsightTemplate] | None = None) -> None:
        self._templates: dict[str, InsightTemplate] = {}
        for template in templates or []:
            self.register(template)

    def register(self, template: InsightTemplate) -> None:
        if template.id in self._templates:
            raise ValueError(f"Duplicate template id registered: {template.id!r}")
        self._templates[template.id] = template

    def get(self, category_id: str) -> InsightTemplate | None:
        return self._templates.get(category_id)

    def all(self) -> list[InsightTemplate]:
        return list(self._templates.values())

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._templates

    def lookup(self, category_id: str, tier: str) -> TemplateEntry | None:
        """Return the entry for a tier, or None when either level is missing."""
        template = self._templates.get(category_id)
        if template is None:
            return None
        return template.tiers.get(tier)

    def resolve(self, category_id: str, tier: str) -> TemplateEntry:
        """Return the entry for a tier, falling back to the generic message.

        Never raises: a missing category or tier yields the category's
        fallback recommendation (or the global one) with no actions.
        """
        entry = self.lookup(category_id, tier)
        if entry is not None:
            return entry

        logger.warning(
            "No template entry for category=%s tier=%s, using fallback",
            category_id,
            tier,
        )
        template = self._templates.get(category_id)
        if template is not None:
            return template.fallback_entry()
        return TemplateEntry(recommendation=GENERIC_RECOMMENDATION, actions=())
