# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Growth phase resolution and land classification.

All predicates here read only server-reported fields and the current
server time, so classifying the same snapshot twice gives the same answer.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field

from farmbot.constants import MAX_AFFLICTION_OWNERS, MS_TIMESTAMP_THRESHOLD, PlantPhase
from farmbot.protocol.messages import LandInfo, PlantInfo, PlantPhaseInfo


def to_time_sec(value: int | float | None) -> int:
    """Normalize a remote timestamp to whole seconds.

    Values above 1e12 are milliseconds. Non-positive values mean "unset"
    and map to 0.
    """
    n = int(value or 0)
    if n <= 0:
        return 0
    if n > MS_TIMESTAMP_THRESHOLD:
        return n // 1000
    return n


def phase_name(phase: int) -> str:
    try:
        return PlantPhase(phase).name.lower()
    except ValueError:
        return f"phase{phase}"


def effective_phase(phases: Sequence[PlantPhaseInfo], now_sec: int) -> PlantPhaseInfo | None:
    """Return the phase in effect at ``now_sec``.

    Scans from the latest phase to the earliest and returns the first one
    whose start time is set and not after ``now_sec``. If every phase starts
    in the future the first phase is returned. Empty input gives None.
    """
    if not phases:
        return None
    for phase in reversed(phases):
        begin = to_time_sec(phase.begin_time)
        if 0 < begin <= now_sec:
            return phase
    return phases[0]


def _elapsed(value: int, now_sec: int) -> bool:
    t = to_time_sec(value)
    return 0 < t <= now_sec


def needs_water(plant: PlantInfo, phase: PlantPhaseInfo, now_sec: int) -> bool:
    return plant.dry_num > 0 or _elapsed(phase.dry_time, now_sec)


def needs_weeding(plant: PlantInfo, phase: PlantPhaseInfo, now_sec: int) -> bool:
    return bool(plant.weed_owners) or _elapsed(phase.weeds_time, now_sec)


def needs_pest_control(plant: PlantInfo, phase: PlantPhaseInfo, now_sec: int) -> bool:
    return bool(plant.insect_owners) or _elapsed(phase.insect_time, now_sec)


def can_afflict(owners: Sequence[int], self_gid: int) -> bool:
    """A peer plant accepts one more affliction of a kind from us."""
    distinct = set(owners)
    return len(distinct) < MAX_AFFLICTION_OWNERS and self_gid not in distinct


class LandStatus(BaseModel):
    """Own-farm classification of one lands snapshot.

    Every unlocked land lands in exactly one of harvestable, dead, growing
    or empty. need_* lists are subsets of growing.
    """

    harvestable: list[int] = Field(default_factory=list)
    dead: list[int] = Field(default_factory=list)
    growing: list[int] = Field(default_factory=list)
    empty: list[int] = Field(default_factory=list)
    locked: list[int] = Field(default_factory=list)
    need_water: list[int] = Field(default_factory=list)
    need_weed: list[int] = Field(default_factory=list)
    need_insect: list[int] = Field(default_factory=list)

    def summary(self) -> dict[str, int]:
        fields = ("harvestable", "need_water", "need_weed", "need_insect", "growing", "empty", "dead")
        return {name: len(getattr(self, name)) for name in fields if getattr(self, name)}

    def action_count(self) -> int:
        return (
            len(self.need_weed)
            + len(self.need_insect)
            + len(self.need_water)
            + len(self.harvestable)
            + len(self.dead)
            + len(self.empty)
        )


def analyze_lands(lands: Sequence[LandInfo], now_sec: int, log: Any = None, verbose: bool = False) -> LandStatus:
    """Classify own lands.

    Args:
        lands: Snapshot from AllLands
        now_sec: Current server time in seconds
        log: Logger for per-land details
        verbose: Log per-land details at info level instead of debug

    Returns:
        LandStatus partition of the snapshot
    """
    status = LandStatus()
    emit = None
    if log is not None:
        emit = log.info if verbose else log.debug

    for land in lands:
        if not land.unlocked:
            status.locked.append(land.id)
            continue

        plant = land.plant
        phase = effective_phase(plant.phases, now_sec) if plant else None
        if plant is None or phase is None:
            status.empty.append(land.id)
            if emit:
                emit("land_classified", land=land.id, result="empty")
            continue

        if phase.phase == PlantPhase.DEAD:
            status.dead.append(land.id)
            result = "dead"
        elif phase.phase == PlantPhase.MATURE:
            status.harvestable.append(land.id)
            result = "harvestable"
        else:
            status.growing.append(land.id)
            result = "growing"
            if needs_water(plant, phase, now_sec):
                status.need_water.append(land.id)
            if needs_weeding(plant, phase, now_sec):
                status.need_weed.append(land.id)
            if needs_pest_control(plant, phase, now_sec):
                status.need_insect.append(land.id)

        if emit:
            emit(
                "land_classified",
                land=land.id,
                plant=plant.name or plant.id,
                phase=phase_name(phase.phase),
                result=result,
                dry_num=plant.dry_num,
                weed_owners=len(plant.weed_owners),
                insect_owners=len(plant.insect_owners),
            )

    return status


class FriendLandStatus(BaseModel):
    """Classification of a peer's lands from the visitor's point of view."""

    stealable: list[int] = Field(default_factory=list)
    need_water: list[int] = Field(default_factory=list)
    need_weed: list[int] = Field(default_factory=list)
    need_insect: list[int] = Field(default_factory=list)
    can_put_weed: list[int] = Field(default_factory=list)
    can_put_insect: list[int] = Field(default_factory=list)

    def summary(self) -> dict[str, int]:
        return {name: len(ids) for name, ids in self.model_dump().items() if ids}


def analyze_friend_lands(lands: Sequence[LandInfo], now_sec: int, self_gid: int) -> FriendLandStatus:
    """Classify a peer's lands into steal, assist and nuisance candidates."""
    status = FriendLandStatus()
    for land in lands:
        plant = land.plant
        if plant is None:
            continue
        phase = effective_phase(plant.phases, now_sec)
        if phase is None:
            continue

        if phase.phase == PlantPhase.MATURE:
            if plant.stealable:
                status.stealable.append(land.id)
            continue
        if phase.phase == PlantPhase.DEAD:
            continue

        if needs_water(plant, phase, now_sec):
            status.need_water.append(land.id)
        if needs_weeding(plant, phase, now_sec):
            status.need_weed.append(land.id)
        if needs_pest_control(plant, phase, now_sec):
            status.need_insect.append(land.id)
        if can_afflict(plant.weed_owners, self_gid):
            status.can_put_weed.append(land.id)
        if can_afflict(plant.insect_owners, self_gid):
            status.can_put_insect.append(land.id)

    return status
