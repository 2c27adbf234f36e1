"""PowerRedistributor — proportional reallocation of spare zone capacity."""

from __future__ import annotations

import math
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

import structlog

from src.core.config import RedistributionConfig
from src.core.types import DonorContribution, RedistributionPlan, Snapshot
from src.power.registry import ZoneRegistry

logger = structlog.stdlib.get_logger()

RECEIVED_REASON = "Received power from other locations"


def round_half_up(value: float) -> int:
    """Round to the nearest whole kWh, halves away from zero."""
    return int(Decimal(repr(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def contribution_reason(amount: int, recipient: str) -> str:
    return f"Contributed {amount} kWh to {recipient}"


class PowerRedistributor:
    """Closes a zone's limit violation by lowering other zones' limits.

    Only zones with a limit set and usage below it can donate.  Each donor
    offers ``donor_share`` of its margin; the rest stays as headroom.  If
    the pooled offer cannot cover the whole excess nothing is changed.
    Otherwise every donor gives a share of the excess proportional to what
    it offered (never dropping below its own usage) and the violating
    zone's limit is raised to ``usage * safety_buffer``.

    All decisions use the snapshot set passed in, not live registry reads.
    """

    def __init__(
        self,
        registry: ZoneRegistry,
        config: RedistributionConfig | None = None,
    ) -> None:
        self._registry = registry
        self._config = config or RedistributionConfig()

    @property
    def config(self) -> RedistributionConfig:
        return self._config

    def plan(
        self,
        violation: Snapshot,
        snapshots: Sequence[Snapshot],
    ) -> RedistributionPlan | None:
        """Compute a reallocation without applying it.

        Returns None when *violation* is not over its limit, when there
        are no donors, or when donors cannot cover the excess.
        """
        if not violation.violating:
            return None

        excess = violation.excess
        donors = [
            s for s in snapshots
            if s.zone != violation.zone and s.limit > 0 and s.usage < s.limit
        ]
        if not donors:
            return None

        share = self._config.donor_share
        offers = [(s, s.margin * share) for s in donors]
        total_available = sum(offer for _, offer in offers)
        if total_available < excess:
            return None

        contributions: list[DonorContribution] = []
        for snap, offer in offers:
            contribution = (offer / total_available) * excess
            # Floor after rounding so the applied limit never drops below usage.
            new_limit = max(math.ceil(snap.usage), round_half_up(snap.limit - contribution))
            contributions.append(DonorContribution(
                zone=snap.zone,
                usage=snap.usage,
                old_limit=snap.limit,
                margin=snap.margin,
                contributable=offer,
                contribution=contribution,
                new_limit=new_limit,
            ))

        return RedistributionPlan(
            zone=violation.zone,
            usage=violation.usage,
            old_limit=violation.limit,
            excess=excess,
            total_available=total_available,
            new_limit=round_half_up(violation.usage * self._config.safety_buffer),
            donors=contributions,
        )

    def apply(self, plan: RedistributionPlan) -> None:
        """Commit a computed plan to the registry as one unit."""
        with self._registry.lock:
            for donor in plan.donors:
                self._registry.set_limit(
                    donor.zone,
                    donor.new_limit,
                    contribution_reason(
                        round_half_up(donor.contribution), plan.zone,
                    ),
                )
            self._registry.set_limit(plan.zone, plan.new_limit, RECEIVED_REASON)

    def attempt(
        self,
        violation: Snapshot,
        snapshots: Sequence[Snapshot],
    ) -> bool:
        """Try to resolve *violation*; return True if limits were rebalanced."""
        with self._registry.lock:
            plan = self.plan(violation, snapshots)
            if plan is None:
                logger.info(
                    "redistribution_infeasible",
                    zone=violation.zone,
                    usage=violation.usage,
                    limit=violation.limit,
                )
                return False
            self.apply(plan)

        logger.info(
            "redistribution_applied",
            zone=plan.zone,
            excess=round(plan.excess, 3),
            total_available=round(plan.total_available, 3),
            donors=[d.zone for d in plan.donors],
            new_limit=plan.new_limit,
        )
        return True
