"""Power management — zone limits, adjustment ledger, and redistribution."""

from src.power.exceptions import InvalidLimitError, PowerError, UnknownZoneError
from src.power.ledger import AdjustmentLedger
from src.power.redistributor import PowerRedistributor, round_half_up
from src.power.registry import ZoneRegistry, validate_limit

__all__ = [
    "AdjustmentLedger",
    "InvalidLimitError",
    "PowerError",
    "PowerRedistributor",
    "UnknownZoneError",
    "ZoneRegistry",
    "round_half_up",
    "validate_limit",
]
