"""Reference data loader — reads insight templates from YAML.

Thresholds live in Python (``thresholds.py``); templates are data files so
copy edits never touch engine code.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from meditrack.domains.insights.reference.templates import (
    GENERIC_RECOMMENDATION,
    InsightTemplate,
    TemplateEntry,
    TemplateRegistry,
)
from meditrack.domains.insights.reference.thresholds import (
    CATEGORY_ORDER,
    DEFAULT_THRESHOLDS,
    ThresholdTables,
)

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_PATH = Path(__file__).resolve().parent / "insight_templates.yaml"


class ReferenceDataError(Exception):
    """Raised when reference data cannot be read or is malformed."""


@dataclass(frozen=True)
class ReferenceData:
    """Thresholds and templates, deserialized once at engine construction."""

    thresholds: ThresholdTables = field(default_factory=ThresholdTables)
    templates: TemplateRegistry = field(default_factory=TemplateRegistry)


def load_reference_data(
    templates_path: str | Path | None = None,
    thresholds: ThresholdTables | None = None,
) -> ReferenceData:
    """Load templates from ``templates_path`` (packaged file by default)."""
    path = Path(templates_path).expanduser() if templates_path else DEFAULT_TEMPLATES_PATH
    registry = TemplateRegistry(load_template_file(path))

    missing = [cid for cid in CATEGORY_ORDER if cid not in registry]
    if missing:
        # Analyzers still run; their insights use the generic fallback text.
        logger.warning("Templates missing for categories: %s", ", ".join(missing))

    logger.info("Loaded %d insight templates from %s", len(registry.all()), path)
    return ReferenceData(thresholds=thresholds or DEFAULT_THRESHOLDS, templates=registry)


def load_template_file(path: str | Path) -> list[InsightTemplate]:
    """Parse a YAML template file into InsightTemplate instances.

    Raises:
        ReferenceDataError: If the file is missing, unparsable, or an entry
            lacks required fields.
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ReferenceDataError(f"Cannot read template file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ReferenceDataError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ReferenceDataError(f"{path}: top-level mapping is required")

    entries = data.get("templates")
    if not isinstance(entries, list):
        raise ReferenceDataError(f"{path}: top-level 'templates' list is required")

    return [_parse_template(item, path) for item in entries]


def _parse_template(data: dict[str, Any], path: Path) -> InsightTemplate:
    try:
        template_id = data["id"]
        tiers_data = data.get("tiers") or {}
        return InsightTemplate(
            id=template_id,
            title=data["title"],
            category=data["category"],
            benefits=data.get("benefits", "").strip(),
            fallback_recommendation=(
                data.get("fallback_recommendation") or GENERIC_RECOMMENDATION
            ).strip(),
            tiers={
                tier: TemplateEntry(
                    recommendation=(entry.get("recommendation") or "").strip(),
                    actions=tuple(entry.get("actions") or ()),
                )
                for tier, entry in tiers_data.items()
            },
        )
    except (KeyError, TypeError, AttributeError) as exc:
        raise ReferenceDataError(f"{path}: malformed template entry: {exc}") from exc
