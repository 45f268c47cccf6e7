"""Durable JSON snapshot of the workout collection."""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List

from models.errors import CorruptSnapshotError, PersistenceError, ValidationError
from models.workout import (
    CYCLING,
    RUNNING,
    WORKOUT_TYPES,
    Coords,
    Workout,
    require_finite,
    require_positive,
    validate_coords,
)

logger = logging.getLogger(__name__)

# Variant specific record key per workout kind
VARIANT_FIELDS = {RUNNING: "cadence", CYCLING: "elevationGain"}


def workout_to_record(workout: Workout) -> Dict[str, Any]:
    """Flatten a workout into a snapshot record."""
    record = {
        "id": workout.id,
        "kind": workout.kind,
        "createdAtISO": workout.created_at.isoformat(),
        "lat": workout.coords.lat,
        "lng": workout.coords.lng,
        "distance": workout.distance,
        "duration": workout.duration,
    }
    record[VARIANT_FIELDS[workout.kind]] = workout.variant_value
    return record


def workout_from_record(record: Any) -> Workout:
    """Rebuild a workout from a snapshot record.

    The stored id and creation time are kept; pace/speed and the description
    are recomputed from the restored fields.

    Raises:
        CorruptSnapshotError: If the record is malformed or of unknown kind
    """
    if not isinstance(record, dict):
        raise CorruptSnapshotError(f"Snapshot record is not an object: {record!r}", record)

    kind = record.get("kind")
    if kind not in WORKOUT_TYPES:
        raise CorruptSnapshotError(f"Unknown workout kind in snapshot: {kind!r}", record)

    workout_id = record.get("id")
    if not isinstance(workout_id, str) or not workout_id:
        raise CorruptSnapshotError(f"Snapshot record has no id: {record!r}", record)

    variant_field = VARIANT_FIELDS[kind]
    other_field = VARIANT_FIELDS[CYCLING if kind == RUNNING else RUNNING]
    if variant_field not in record or other_field in record:
        raise CorruptSnapshotError(
            f"Record {workout_id} must carry exactly '{variant_field}' for kind {kind}", record
        )

    try:
        created_at = datetime.fromisoformat(record["createdAtISO"])
        coords = validate_coords((record["lat"], record["lng"]))
        distance = require_positive(record["distance"], "distance")
        duration = require_positive(record["duration"], "duration")
        if kind == RUNNING:
            variant_value = require_positive(record[variant_field], "cadence")
        else:
            variant_value = require_finite(record[variant_field], "elevation_gain")
    except KeyError as e:
        raise CorruptSnapshotError(f"Record {workout_id} is missing field {e}", record)
    except (TypeError, ValueError, OverflowError, ValidationError) as e:
        raise CorruptSnapshotError(f"Record {workout_id} is invalid: {e}", record)

    workout_type = WORKOUT_TYPES[kind]
    common = dict(id=workout_id, created_at=created_at, coords=Coords(*coords),
                  distance=distance, duration=duration)
    if kind == RUNNING:
        return workout_type(cadence=variant_value, **common)
    return workout_type(elevation_gain=variant_value, **common)


class SnapshotStore:
    """Persistence adapter writing the whole collection to one JSON file."""

    def __init__(self, path: Path):
        """Initialize snapshot store.

        Args:
            path: JSON file holding the snapshot; created on first save
        """
        self.path = Path(path)
        self.skipped_records = 0

    def save(self, workouts: Iterable[Workout]) -> None:
        """Replace the snapshot with ``workouts``.

        The file is written to a temporary sibling and moved into place, so a
        failed write leaves the previous snapshot intact.

        Raises:
            PersistenceError: If the snapshot could not be written
        """
        try:
            payload = json.dumps([workout_to_record(w) for w in workouts], indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to serialize workouts: {e}")

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.path.parent,
                prefix=f".{self.path.name}.", suffix=".tmp", delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Failed to write snapshot {self.path}: {e}")

        logger.debug(f"Saved snapshot to {self.path}")

    def load(self, strict: bool = False) -> List[Workout]:
        """Read the snapshot back into workouts.

        Args:
            strict: Raise on the first bad record instead of skipping it

        Returns:
            Workouts in stored order; empty if no snapshot exists

        Raises:
            CorruptSnapshotError: If the file is unreadable, or a record is
                bad and ``strict`` is set
        """
        self.skipped_records = 0
        if not self.path.exists():
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptSnapshotError(f"Snapshot {self.path} is unreadable: {e}")

        if data is None:
            return []
        if not isinstance(data, list):
            raise CorruptSnapshotError(f"Snapshot {self.path} is not a list of workouts")

        workouts = []
        for position, record in enumerate(data):
            try:
                workouts.append(workout_from_record(record))
            except CorruptSnapshotError as e:
                if strict:
                    raise
                self.skipped_records += 1
                logger.warning(f"Skipping snapshot record #{position}: {e}")

        logger.info(f"Loaded {len(workouts)} workouts from {self.path}")
        return workouts
