# recorder/planning/planner.py
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence

from recorder.planning.units import InstallableUnit, PlannedStep
from recorder.resources.descriptors import UNAVAILABLE, RegistryResource, UnavailableResource, UrlResource

logger = logging.getLogger(__name__)

__all__ = ["buildReverseIndex", "planUnits"]

Descriptor = RegistryResource | UrlResource | UnavailableResource



def buildReverseIndex(units: Sequence[InstallableUnit]) -> dict[str, list[str]]:
    """
    requiredId → [dependentIds], in discovery order: units are scanned in
    input order and each unit's `requires` in declaration order.

    Only edges whose target is one of `units` are kept. A dangling
    requirement may well be satisfied elsewhere, so it is not an error.
    """
    present = {unit.id for unit in units}
    index: dict[str, list[str]] = {}
    for unit in units:
        for requiredId in unit.requires:
            if requiredId == unit.id:
                continue
            if requiredId not in present:
                logger.debug("Ignoring requirement '%s' of '%s': not among planned units", requiredId, unit.id)
                continue
            dependents = index.setdefault(requiredId, [])
            if unit.id not in dependents:
                dependents.append(unit.id)
    return index



def planUnits(
    units: Sequence[InstallableUnit],
    resources: Mapping[str, Descriptor] | Callable[[str], Descriptor] | None = None,
) -> list[PlannedStep]:
    """
    Orders `units` so that a required unit is installed before the units
    that declared it, and keeps input order otherwise.

    Single pass: every unit that is required by another is hoisted to the
    front (in reverse-index discovery order), annotated with the names of
    the dependents that needed it; the rest follow in input order. Chains
    deeper than one level (A requires B requires C) are not re-ordered
    transitively and the graph is assumed to be acyclic.

    `resources` supplies each unit's descriptor, either as a mapping or as a
    resolver callable. Units without one get UNAVAILABLE.
    """
    byId: dict[str, InstallableUnit] = {}
    ordered: list[InstallableUnit] = []
    for unit in units:
        if unit.id in byId:
            logger.warning("Duplicate unit '%s' ignored during planning", unit.id)
            continue
        byId[unit.id] = unit
        ordered.append(unit)

    def _resourceFor(unitId: str) -> Descriptor:
        if resources is None:
            return UNAVAILABLE
        if callable(resources):
            return resources(unitId)
        return resources.get(unitId, UNAVAILABLE)

    reverseIndex = buildReverseIndex(ordered)
    emitted: set[str] = set()
    plan: list[PlannedStep] = []

    for requiredId, dependentIds in reverseIndex.items():
        if requiredId in emitted:
            continue
        names = ", ".join(byId[dependentId].displayName for dependentId in dependentIds)
        plan.append(PlannedStep(
            unit=byId[requiredId],
            resource=_resourceFor(requiredId),
            annotation=f"Required by: {names}",
        ))
        emitted.add(requiredId)

    for unit in ordered:
        if unit.id in emitted:
            continue
        plan.append(PlannedStep(unit=unit, resource=_resourceFor(unit.id)))
        emitted.add(unit.id)

    if reverseIndex:
        logger.debug("Planned %d units, hoisted %s", len(plan), list(reverseIndex))
    return plan
