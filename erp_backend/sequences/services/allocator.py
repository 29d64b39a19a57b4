# sequences/services/allocator.py

"""
======================================================
PATH: sequences/services/allocator.py
======================================================
SEQUENCE ALLOCATOR (SHARDED COUNTER)

Answers ONE question:
"What is the next number for this counter?"

Model:
- A counter name owns S shard rows (S = AUTOMATION["SHARD_COUNT"], default 5)
- The counter value is the sum of its shard counts
- Each allocation increments ONE randomly chosen shard by 1

Contract:
- allocate() MUST run inside the caller's transaction.atomic() block.
  The increment, the read of every shard and the caller's other writes
  commit (or roll back) together; a rolled back caller leaves no trace.
- Values are UNIQUE, not chronological: two concurrent callers may commit
  in the opposite order of the values they received.

Concurrency (relational store):
- The shard set is read with select_for_update() in shard_index order, so
  the sum a caller observes cannot be observed by another caller until the
  first one commits. Ordered locking keeps concurrent allocators deadlock-free.
- The returned value is the locked sum + 1 (the increment issued by this
  call).
- Because every call locks ALL S shards, concurrent allocators on one
  counter are fully serialized: the fan-out gives no write parallelism
  under this scheme. It only spreads the increments across rows; the
  uniqueness of the returned value comes from the lock.
"""

from __future__ import annotations

import logging
import random

from django.db import transaction
from django.db.models import F, Sum

from backend.conf import automation_setting
from sequences.models import CounterShard

logger = logging.getLogger(__name__)


# ============================================================
# DOMAIN ERRORS
# ============================================================


class SequenceAllocationError(Exception):
    """Raised when a sequence value cannot be allocated."""


# ============================================================
# HELPERS
# ============================================================


def _norm_counter_name(counter_name: str) -> str:
    name = (counter_name or "").strip()
    if not name:
        raise SequenceAllocationError("counter_name is required")
    return name


def _resolve_shard_count(shard_count: int | None) -> int:
    if shard_count is None:
        shard_count = automation_setting("SHARD_COUNT")
    try:
        shard_count = int(shard_count)
    except (TypeError, ValueError) as exc:
        raise SequenceAllocationError(f"Invalid shard count: {shard_count!r}") from exc
    if shard_count < 1:
        raise SequenceAllocationError("Shard count must be at least 1")
    return shard_count


def ensure_shards(counter_name: str, shard_count: int | None = None) -> int:
    """
    Create any missing shard rows (count=0) for counter_name.

    The existence probe runs first so the common path (shards already
    present) costs one COUNT query and no writes.

    Returns the number of shard rows created.
    """
    name = _norm_counter_name(counter_name)
    shard_count = _resolve_shard_count(shard_count)

    existing = CounterShard.objects.filter(
        counter_name=name, shard_index__lt=shard_count
    ).count()
    if existing >= shard_count:
        return 0

    present = set(
        CounterShard.objects.filter(counter_name=name).values_list("shard_index", flat=True)
    )
    missing = [
        CounterShard(counter_name=name, shard_index=i, count=0)
        for i in range(shard_count)
        if i not in present
    ]

    # ignore_conflicts: a concurrent initializer may have won the race
    CounterShard.objects.bulk_create(missing, ignore_conflicts=True)

    logger.info(
        "Initialized counter shards",
        extra={"counter": name, "shards_created": len(missing), "fan_out": shard_count},
    )
    return len(missing)


# ============================================================
# PUBLIC API
# ============================================================


def allocate(counter_name: str, *, shard_count: int | None = None, rng=None) -> int:
    """
    Allocate the next value of counter_name.

    Args:
        counter_name: logical counter, e.g. "sales_orders"
        shard_count: fan-out override (defaults to AUTOMATION["SHARD_COUNT"])
        rng: object with .choice(); defaults to the `random` module

    Returns:
        int: a value never returned before for this counter
    """
    name = _norm_counter_name(counter_name)
    shard_count = _resolve_shard_count(shard_count)

    if not transaction.get_connection().in_atomic_block:
        raise SequenceAllocationError(
            f"allocate('{name}') must be called inside transaction.atomic()"
        )

    ensure_shards(name, shard_count)

    shards = list(
        CounterShard.objects.select_for_update()
        .filter(counter_name=name)
        .order_by("shard_index")
    )

    # Shards beyond the current fan-out (fan-out reduced later) still count
    # toward the total, but only indexes < shard_count receive increments.
    total = sum(int(s.count) for s in shards)
    candidates = [s for s in shards if s.shard_index < shard_count]
    if not candidates:
        raise SequenceAllocationError(f"No shards available for counter '{name}'")

    chosen = (rng or random).choice(candidates)
    CounterShard.objects.filter(pk=chosen.pk).update(count=F("count") + 1)

    value = total + 1
    logger.debug(
        "Allocated sequence value",
        extra={"counter": name, "shard": chosen.shard_index, "value": value},
    )
    return value


def counter_total(counter_name: str) -> int:
    """Current logical value (sum of shard counts); 0 for unknown counters."""
    name = _norm_counter_name(counter_name)
    agg = CounterShard.objects.filter(counter_name=name).aggregate(total=Sum("count"))
    return int(agg.get("total") or 0)


@transaction.atomic
def raise_counter_to(counter_name: str, target: int, *, shard_count: int | None = None) -> int:
    """
    Raise the logical value of counter_name to at least `target`.

    Never lowers a counter: increments only, so the sum invariant holds.
    Returns the amount added (0 when already at/above target).
    """
    name = _norm_counter_name(counter_name)
    shard_count = _resolve_shard_count(shard_count)
    ensure_shards(name, shard_count)

    shards = list(
        CounterShard.objects.select_for_update()
        .filter(counter_name=name)
        .order_by("shard_index")
    )
    total = sum(int(s.count) for s in shards)
    delta = int(target) - total
    if delta <= 0:
        return 0

    CounterShard.objects.filter(pk=shards[0].pk).update(count=F("count") + delta)
    logger.info(
        "Counter raised",
        extra={"counter": name, "from": total, "to": int(target)},
    )
    return delta
