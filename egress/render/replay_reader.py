"""Read run logs and yield TickPayloads."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator

from pydantic import ValidationError

from egress.sim.contracts import TickPayload

logger = logging.getLogger(__name__)


def read_header(path: Path) -> dict[str, Any] | None:
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            record = _parse_record(line)
            if record and record.get("type") == "header":
                metadata = record.get("metadata")
                return metadata if isinstance(metadata, dict) else {}
    return None


def read_tick_payloads(path: Path) -> Iterator[TickPayload]:
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            payload = parse_tick_line(line)
            if payload is not None:
                yield payload


def parse_tick_line(line: str) -> TickPayload | None:
    """The tick on one log line; None for headers and unreadable lines."""
    record = _parse_record(line)
    if record is None or record.get("type") != "tick":
        return None
    payload = record.get("payload")
    if payload is None:
        return None
    try:
        return TickPayload.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Skipping invalid tick record: %s", exc.errors()[:1])
        return None


def _parse_record(line: str) -> dict[str, Any] | None:
    try:
        record = json.loads(line)
    except json.JSONDecodeError:
        return None
    return record if isinstance(record, dict) else None
