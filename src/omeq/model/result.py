from __future__ import annotations

import math
from dataclasses import dataclass

from omeq.utils.enums import Reason


@dataclass(frozen=True, eq=True, slots=True)
class CalculationResult:
    """
    Either a non-negative OMEQ value tagged `Reason.OK`, or no value and the
    reason it could not be computed.
    """

    omeq: float | None
    reason: Reason

    def __post_init__(self):
        if self.reason is Reason.OK:
            if self.omeq is None or math.isnan(self.omeq) or self.omeq < 0:
                raise ValueError(
                    f"A successful result needs a non-negative value, not "
                    f"{self.omeq}."
                )
        elif self.omeq is not None:
            raise ValueError(
                f"Result with reason {self.reason.value} must not carry a "
                f"value."
            )

    @classmethod
    def ok(cls, omeq: float) -> CalculationResult:
        return cls(omeq=omeq, reason=Reason.OK)

    @classmethod
    def failed(cls, reason: Reason) -> CalculationResult:
        return cls(omeq=None, reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.reason is Reason.OK
