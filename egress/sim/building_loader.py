"""Load an already-parsed building description from JSON."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from egress.sim.contracts import Building

logger = logging.getLogger(__name__)

DEFAULT_BUILDING_PATH = Path("data/building.json")


def load_building(path: Path = DEFAULT_BUILDING_PATH) -> Building:
    building = Building.model_validate(_load_json(path))
    logger.info(
        "Loaded %s: %d level(s), %d area(s)",
        path,
        len(building.building_levels),
        sum(len(level.areas) for level in building.building_levels),
    )
    return building


def _load_json(path: Path) -> dict:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"Missing building file: {path}") from exc
    return json.loads(text)
