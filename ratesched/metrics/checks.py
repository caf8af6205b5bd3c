"""Timeline checks — verify a produced timeline against its batch."""

from typing import Sequence

from ratesched.errors import TimelineViolation
from ratesched.models.batch import RatePolicy, TaskBatch
from ratesched.models.task import ExecutionRecord


def window_usage(records: Sequence[ExecutionRecord], at: int, window_ms: int = 1000) -> int:
    """Work from `records` overlapping [at - window_ms, at)."""
    floor = at - window_ms
    return sum(max(0, min(r.end, at) - max(r.start, floor)) for r in records)


def peak_window_usage(records: Sequence[ExecutionRecord], window_ms: int = 1000) -> int:
    """Largest amount of work inside any rolling window.

    Usage is piecewise linear in the window position, so the maximum is
    reached where a window edge meets a record boundary: a window ending at
    some record's end, or starting at some record's start.
    """
    if not records:
        return 0
    ordered = sorted(records, key=lambda r: (r.start, r.end))
    ends = [r.end for r in ordered] + [r.start + window_ms for r in ordered]
    ends.sort()

    peak = 0
    left = 0
    for at in ends:
        floor = at - window_ms
        while left < len(ordered) and ordered[left].end <= floor:
            left += 1
        used = 0
        for r in ordered[left:]:
            if r.start >= at:
                break
            used += max(0, min(r.end, at) - max(r.start, floor))
        peak = max(peak, used)
    return peak


def check_timeline(
    batch: TaskBatch,
    records: Sequence[ExecutionRecord],
    raise_on_error: bool = False,
) -> list[str]:
    """List every invariant `records` breaks for `batch` (empty when valid)."""
    violations: list[str] = []
    tasks = batch.task_map()

    seen: set[str] = set()
    for r in records:
        if r.id in seen:
            violations.append(f"{r.id}: scheduled more than once")
        seen.add(r.id)
    for task_id in tasks.keys() - seen:
        violations.append(f"{task_id}: never scheduled")
    for task_id in seen - tasks.keys():
        violations.append(f"{task_id}: not in the batch")

    for r in records:
        task = tasks.get(r.id)
        if task is None:
            continue
        if r.end - r.start != task.duration:
            violations.append(f"{r.id}: ran {r.end - r.start}ms, expected {task.duration}ms")
        if r.start < task.created_at:
            violations.append(f"{r.id}: starts at {r.start}, before it arrives at {task.created_at}")
        if r.start < batch.start_time:
            violations.append(f"{r.id}: starts at {r.start}, before the scheduler starts at {batch.start_time}")

    for prev, cur in zip(records, records[1:]):
        if cur.start < prev.start:
            violations.append(f"{cur.id}: out of start order after {prev.id}")
        if cur.start < prev.end:
            violations.append(f"{cur.id}: overlaps {prev.id} ({cur.start} < {prev.end})")

    if batch.policy is RatePolicy.STRICT:
        violations.extend(_strict_window_violations(batch, records))
    else:
        violations.extend(_admission_violations(batch, records))

    if violations and raise_on_error:
        raise TimelineViolation(violations)
    return violations


def _usage_before(records: Sequence[ExecutionRecord], j: int, window_ms: int) -> int:
    """Work from records before `j` inside the window ending at its start."""
    r = records[j]
    floor = r.start - window_ms
    used = 0
    i = j - 1
    while i >= 0 and records[i].end > floor:
        used += max(0, min(records[i].end, r.start) - max(records[i].start, floor))
        i -= 1
    return used


def _overlong_violation(batch: TaskBatch, records: Sequence[ExecutionRecord], j: int) -> list[str]:
    """A task longer than the limit is allowed only into an empty window."""
    before = _usage_before(records, j, batch.window_ms)
    if before:
        return [f"{records[j].id}: overlong task starts with {before}ms already in the window"]
    return []


def _strict_window_violations(batch: TaskBatch, records: Sequence[ExecutionRecord]) -> list[str]:
    """Work before each start plus the task itself must fit the limit."""
    violations = []
    for j, r in enumerate(records):
        if r.duration > batch.rate_limit_ms:
            violations.extend(_overlong_violation(batch, records, j))
            continue
        held = _usage_before(records, j, batch.window_ms) + r.duration
        if held > batch.rate_limit_ms:
            violations.append(f"{r.id}: window holds {held}ms, limit {batch.rate_limit_ms}ms")
    return violations


def _admission_violations(batch: TaskBatch, records: Sequence[ExecutionRecord]) -> list[str]:
    """Each start must find the window's charged budget not yet used up."""
    violations = []
    for j, r in enumerate(records):
        if r.duration > batch.rate_limit_ms:
            violations.extend(_overlong_violation(batch, records, j))
            continue
        charged = 0
        i = j - 1
        while i >= 0 and records[i].start > r.start - batch.window_ms:
            charged += records[i].duration
            i -= 1
        if charged >= batch.rate_limit_ms:
            violations.append(
                f"{r.id}: admitted with {charged}ms charged, limit {batch.rate_limit_ms}ms"
            )
    return violations
