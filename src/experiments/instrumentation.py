from __future__ import annotations

import csv
import json
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

# Columns written for each allocator event, after the common ones.
EVENT_SCHEMAS: Dict[str, Tuple[str, ...]] = {
    "allocation": ("process_id", "size", "address", "strategy", "blocks", "heap_used", "heap_free"),
    "queued": ("process_id", "size", "queue_length", "heap_free"),
    "rejected": ("process_id", "size", "reason"),
    "free": ("process_id", "address", "size", "held_seconds", "heap_used", "heap_free"),
    "promotion": ("process_id", "address", "size", "wait_seconds", "queue_length"),
}
COMMON_COLUMNS = ("timestamp", "run_id", "event")


@dataclass
class MemoryProfiler:
    """
    Event trail of one AllocationManager run.

    Only the allocator's own events are accepted, each with a fixed set of
    fields. flush() writes the trail as JSONL, one CSV per event type, and a
    JSON summary with per-event counts and queue figures.
    """

    run_id: str
    output_dir: Optional[str] = None
    write_immediately: bool = False
    events: List[Dict[str, object]] = field(default_factory=list)

    def record_event(self, event_type: str, payload: Dict[str, object]) -> None:
        schema = EVENT_SCHEMAS.get(event_type)
        if schema is None:
            raise ValueError(f"Unknown allocator event {event_type!r}")
        unexpected = set(payload) - set(schema)
        if unexpected:
            raise ValueError(f"Unexpected fields for {event_type!r}: {sorted(unexpected)}")
        record: Dict[str, object] = {"timestamp": time.time(), "run_id": self.run_id, "event": event_type}
        for column in schema:
            record[column] = payload.get(column)
        self.events.append(record)
        if self.write_immediately and self.output_dir:
            with self._path(".jsonl").open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(record) + "\n")

    def events_of(self, event_type: str) -> List[Dict[str, object]]:
        return [record for record in self.events if record["event"] == event_type]

    def counts(self) -> Dict[str, int]:
        return dict(Counter(str(record["event"]) for record in self.events))

    def summary(self) -> Dict[str, object]:
        waits = [float(record["wait_seconds"]) for record in self.events_of("promotion")
                 if record["wait_seconds"] is not None]
        rejections = Counter(str(record["reason"]) for record in self.events_of("rejected"))
        queue_lengths = [int(record["queue_length"]) for record in self.events_of("queued")]
        return {
            "run_id": self.run_id,
            "counts": self.counts(),
            "rejections": dict(rejections),
            "peak_queue_length": max(queue_lengths, default=0),
            "avg_wait_seconds": sum(waits) / len(waits) if waits else 0.0,
        }

    def flush(self) -> None:
        if not self.output_dir or not self.events:
            return
        with self._path(".jsonl").open("w", encoding="utf-8") as handle:
            for record in self.events:
                handle.write(json.dumps(record) + "\n")
        for event_type, schema in EVENT_SCHEMAS.items():
            rows = self.events_of(event_type)
            if not rows:
                continue
            with self._path(f"_{event_type}.csv").open("w", newline="", encoding="utf-8") as handle:
                writer = csv.DictWriter(handle, fieldnames=list(COMMON_COLUMNS + schema))
                writer.writeheader()
                writer.writerows(rows)
        with self._path("_summary.json").open("w", encoding="utf-8") as handle:
            json.dump(self.summary(), handle, indent=2)

    def _path(self, suffix: str) -> Path:
        output_path = Path(self.output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        return output_path / f"{self.run_id}{suffix}"
