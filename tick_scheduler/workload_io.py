from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import InputUnavailable, MalformedEvent
from .models import EventRecord, validate_records
from .policies import Policy

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "y"}
_FALSE = {"", "0", "false", "no", "n"}


@dataclass
class Workload:
    policy: Optional[Policy]
    quantum: Optional[int]
    records: List[EventRecord] = field(default_factory=list)


def load_workload(path: str | Path) -> Workload:
    """
    Load a workload from a classic text, JSON or CSV file.

    Records are validated here so the engine only ever sees well-formed,
    chronologically sorted input.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    try:
        if suffix == ".json":
            workload = _load_json(path)
        elif suffix == ".csv":
            workload = _load_csv(path)
        else:
            workload = _load_text(path)
    except OSError as exc:
        raise InputUnavailable(f"Unable to read workload {path}: {exc}") from exc

    validate_records(workload.records)
    logger.debug("Loaded %d event records from %s", len(workload.records), path)
    return workload


def parse_text(text: str) -> Workload:
    """
    Parse the classic format: policy, quantum (RR only), then
    ``arrival duration is_block_request`` triples.
    """
    tokens = text.split()
    if not tokens:
        raise MalformedEvent("Workload is empty; expected a scheduling policy first")

    policy = Policy.parse(tokens[0])
    pos = 1
    quantum = None
    if policy.needs_quantum:
        if len(tokens) < 2:
            raise MalformedEvent("Round Robin workload is missing its time quantum")
        quantum = _to_int(tokens[1], "quantum")
        pos = 2

    body = tokens[pos:]
    if len(body) % 3:
        raise MalformedEvent(f"Incomplete event record at end of workload: {body[-(len(body) % 3):]}")

    records = [
        EventRecord(
            arrival_time=_to_int(body[i], "arrival time"),
            duration=_to_int(body[i + 1], "duration"),
            is_block_request=_to_flag(body[i + 2]),
        )
        for i in range(0, len(body), 3)
    ]
    return Workload(policy=policy, quantum=quantum, records=records)


def _load_text(path: Path) -> Workload:
    with path.open("r", encoding="utf-8") as f:
        return parse_text(f.read())


def _load_json(path: Path) -> Workload:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise MalformedEvent(f"Invalid JSON workload: {exc}") from exc

    policy = None
    quantum = None
    if isinstance(raw, dict):
        if raw.get("policy") is not None:
            policy = Policy.parse(raw["policy"])
        if raw.get("quantum") is not None:
            quantum = _to_int(raw["quantum"], "quantum")
        raw = raw.get("events", [])

    if not isinstance(raw, list):
        raise MalformedEvent("JSON workload must be a list of events or an object with an 'events' list")

    records = [_record_from_mapping(entry) for entry in raw]
    return Workload(policy=policy, quantum=quantum, records=records)


def _load_csv(path: Path) -> Workload:
    records: List[EventRecord] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            records.append(_record_from_mapping(row))
    return Workload(policy=None, quantum=None, records=records)


def _record_from_mapping(mapping) -> EventRecord:
    try:
        arrival_time = _to_int(mapping["arrival_time"], "arrival time")
        raw_duration = mapping.get("duration")
        if raw_duration is None:
            raw_duration = mapping["burst_time"]
        duration = _to_int(raw_duration, "duration")
    except (KeyError, TypeError, AttributeError) as exc:
        raise MalformedEvent(f"Invalid event entry: {mapping!r}") from exc

    return EventRecord(
        arrival_time=arrival_time,
        duration=duration,
        is_block_request=_to_flag(mapping.get("block")),
    )


def _to_int(value, what: str) -> int:
    if isinstance(value, bool):
        raise MalformedEvent(f"Invalid {what}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise MalformedEvent(f"Invalid {what}: {value!r}") from exc


def _to_flag(value) -> bool:
    if value is None or isinstance(value, bool):
        return bool(value)
    key = str(value).strip().lower()
    if key in _TRUE:
        return True
    if key in _FALSE:
        return False
    raise MalformedEvent(f"Invalid block flag: {value!r}")
