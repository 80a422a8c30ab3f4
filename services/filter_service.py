from typing import List, Dict, Any, Iterable, Optional
from pydantic import BaseModel, Field
from loguru import logger
from core.models import AircraftSnapshot
from utils.data_processing import get_carrier_code, is_above_ceiling

REASON_INVALID_HEX = "invalid_hex"
REASON_IGNORED_CARRIER = "ignored_carrier"
REASON_GROUNDED = "grounded"
REASON_ABOVE_CEILING = "above_ceiling"


class FilterDecision(BaseModel):
    accepted: bool
    reason: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class FilterService:
    def __init__(self, max_altitude_ft: Optional[float] = None, ignored_carriers: Optional[Iterable[str]] = None):
        self.max_altitude_ft = max_altitude_ft
        self.ignored_carriers = {
            code.strip().upper()
            for code in (ignored_carriers or [])
            if isinstance(code, str) and code.strip()
        }

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "FilterService":
        filters = config.get("filters", {}) or {}
        return cls(
            max_altitude_ft=filters.get("max_altitude_ft"),
            ignored_carriers=filters.get("ignored_carriers", []),
        )

    def should_ignore_carrier(self, flight: Any) -> bool:
        if not self.ignored_carriers:
            return False
        carrier = get_carrier_code(flight)
        return carrier is not None and carrier in self.ignored_carriers

    def check(self, snapshot: AircraftSnapshot) -> FilterDecision:
        """
        Decide whether a snapshot may reach the notification path.
        Checks run in a fixed order and the first failing one names the rejection.
        """
        if not snapshot.hex:
            return FilterDecision(accepted=False, reason=REASON_INVALID_HEX, details={"hex": snapshot.raw.get("hex")})

        if self.should_ignore_carrier(snapshot.flight):
            return FilterDecision(
                accepted=False,
                reason=REASON_IGNORED_CARRIER,
                details={"carrier": get_carrier_code(snapshot.flight)},
            )

        if snapshot.on_ground:
            return FilterDecision(accepted=False, reason=REASON_GROUNDED)

        ceiling = float(self.max_altitude_ft) if self.max_altitude_ft is not None else None
        if is_above_ceiling(snapshot.altitude_ft, ceiling):
            return FilterDecision(
                accepted=False,
                reason=REASON_ABOVE_CEILING,
                details={"altitude_ft": snapshot.altitude_ft, "max_altitude_ft": ceiling},
            )

        return FilterDecision(accepted=True)

    def filter(self, snapshots: List[AircraftSnapshot]) -> List[AircraftSnapshot]:
        accepted = []
        for snapshot in snapshots:
            decision = self.check(snapshot)
            if decision.accepted:
                accepted.append(snapshot)
            else:
                logger.debug(f"Filtered {snapshot.hex or '?'} ({snapshot.flight or '-'}): {decision.reason} {decision.details}")
        return accepted
