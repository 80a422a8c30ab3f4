from .healthchecks import (
    VARIANT_FAIL,
    VARIANT_START,
    VARIANT_SUCCESS,
    HealthcheckPinger,
)

__all__ = [
    "VARIANT_FAIL",
    "VARIANT_START",
    "VARIANT_SUCCESS",
    "HealthcheckPinger",
]
