"""
Attendance reconciliation and record editing.

The *working* attendance list of a session always holds exactly one
record per player currently on the team roster, in roster order.
:func:`reconcile` builds it from the roster and whatever was persisted
before; it is idempotent and safe to re-run whenever the roster changes:

    reconcile(roster, reconcile(roster, A)) == reconcile(roster, A)

Records are immutable.  Edits go through :func:`update_record`, keyed
by an :class:`AttendanceField` rather than a dotted string path.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Protocol, Sequence

from pydantic import ValidationError as PydanticValidationError

from app.schemas.training_session import (AttendanceRecord, AttendanceStatus, AttendanceSummary, )
from app.training.errors import ValidationError


class RosterPlayer(Protocol):
    id: int


class AttendanceField(str, Enum):
    STATUS = "status"
    RATING = "rating"
    NOTES = "notes"
    ARRIVAL_TIME = "arrival_time"
    EFFORT = "performance.effort"
    TECHNIQUE = "performance.technique"
    ATTITUDE = "performance.attitude"
    TEAMWORK = "performance.teamwork"

    @property
    def performance_axis(self) -> str | None:
        prefix, _, axis = self.value.partition(".")
        return axis if prefix == "performance" else None


PRESENT_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LATE})


def default_record(player_id: int) -> AttendanceRecord:
    """Record synthesized for a roster player with nothing persisted."""
    return AttendanceRecord(player_id=player_id)


# ======================================================================
# Reconciliation
# ======================================================================


def reconcile(roster: Sequence[RosterPlayer], persisted: Iterable[AttendanceRecord]) -> list[AttendanceRecord]:
    """Merge *roster* with *persisted* records into a gap-free list.

    Persisted records for roster players are carried forward unchanged
    (the first one wins if the input repeats a player).  Players with no
    record get :func:`default_record`.  Records for players who left the
    roster are dropped from the result only.
    """
    by_player: dict[int, AttendanceRecord] = {}
    for record in persisted:
        by_player.setdefault(record.player_id, record)

    result = []
    seen: set[int] = set()
    for player in roster:
        if player.id in seen:
            continue
        seen.add(player.id)
        result.append(by_player.get(player.id) or default_record(player.id))
    return result


def check_complete(roster_ids: Iterable[int], attendance: Sequence[AttendanceRecord]) -> None:
    """Raise :class:`ValidationError` unless *attendance* covers the roster exactly.

    One record per roster player, no duplicates, no foreign players.
    """
    expected = set(roster_ids)
    ids = [r.player_id for r in attendance]

    duplicates = sorted({pid for pid in ids if ids.count(pid) > 1})
    if duplicates:
        raise ValidationError(f"Duplicate attendance records for players {duplicates}")

    missing = sorted(expected - set(ids))
    extra = sorted(set(ids) - expected)
    if missing or extra:
        raise ValidationError(f"Attendance does not match the team roster "
                              f"(missing: {missing}, not on roster: {extra})")


# ======================================================================
# Editing
# ======================================================================


def update_record(record: AttendanceRecord, field: AttendanceField, value: Any) -> AttendanceRecord:
    """Return a copy of *record* with *field* set to *value*.

    The new record is fully validated; on failure :class:`ValidationError`
    is raised and *record* is untouched (it is frozen anyway).
    """
    field = AttendanceField(field)
    data = record.model_dump()

    axis = field.performance_axis
    if axis is not None:
        data["performance"] = {**data["performance"], axis: value}
    else:
        data[field.value] = value

    try:
        return AttendanceRecord.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid value {value!r} for {field.value}: {e.errors()[0]['msg']}") from e


def update_attendance(records: Sequence[AttendanceRecord], player_id: int, field: AttendanceField,
                      value: Any, ) -> list[AttendanceRecord]:
    """Apply :func:`update_record` to the record of *player_id*."""
    if not any(r.player_id == player_id for r in records):
        raise ValidationError(f"Player {player_id} is not in the attendance list")
    return [update_record(r, field, value) if r.player_id == player_id else r for r in records]


def toggle_presence(record: AttendanceRecord) -> AttendanceRecord:
    """Present or late becomes absent; anything else becomes present."""
    new_status = (AttendanceStatus.ABSENT if record.status in PRESENT_STATUSES else AttendanceStatus.PRESENT)
    return update_record(record, AttendanceField.STATUS, new_status)


# ======================================================================
# Summary
# ======================================================================


def attendance_summary(records: Sequence[AttendanceRecord]) -> AttendanceSummary:
    """Count records per status.  ``percentage`` counts late players as present."""
    if not records:
        return AttendanceSummary()

    counts = {status.value: 0 for status in AttendanceStatus}
    for record in records:
        counts[AttendanceStatus(record.status).value] += 1

    total = len(records)
    attended = counts["present"] + counts["late"]
    return AttendanceSummary(total=total, percentage=int(attended * 100 / total + 0.5), **counts)
