"""
SGP4 Error Types

Every failure of the parse -> initialize -> propagate pipeline is raised as a
subclass of SGP4Error carrying a numeric code (see ERROR_CODES) and the
pipeline stage that produced it, so callers can tell failures apart without
parsing messages.
"""

from typing import Optional


# Error code meanings
ERROR_CODES = {
    0: "No error",
    1: "Mean eccentricity outside [0, 1)",
    2: "Mean motion is not positive",
    4: "Semi-latus rectum < 0.0",
    6: "Satellite has decayed",
    7: "Kepler's equation did not converge",
    8: "Deep-space regime (period >= 225 min) is not supported",
    9: "Malformed TLE record",
}


class SGP4Error(Exception):
    """Base class for all orbit_core errors."""

    code = 0
    stage = ""

    def __init__(self, message: str, code: Optional[int] = None, stage: Optional[str] = None):
        super().__init__(message)
        if code is not None:
            self.code = code
        if stage is not None:
            self.stage = stage

    @property
    def description(self) -> str:
        return ERROR_CODES.get(self.code, f"Unknown error code {self.code}")


class TLEFormatError(SGP4Error, ValueError):
    """Malformed TLE text. No Satellite is produced."""

    code = 9
    stage = "parse"

    def __init__(self, message: str, field: Optional[str] = None, line_number: Optional[int] = None):
        super().__init__(message)
        self.field = field
        self.line_number = line_number


class InvalidElementsError(SGP4Error, ValueError):
    """Parsed elements that cannot describe a bound orbit."""

    code = 2
    stage = "initialize"


class PropagationError(SGP4Error, RuntimeError):
    """Failure of a single propagate call; other times stay valid."""

    stage = "propagate"

    def __init__(self, message: str, tsince: float, code: Optional[int] = None,
                 stage: Optional[str] = None):
        super().__init__(message, code=code, stage=stage)
        self.tsince = tsince


class SatelliteDecayedError(PropagationError):
    """The perturbed orbit left its physical domain: the satellite re-entered."""

    code = 6
    stage = "decay_check"


class KeplerConvergenceError(PropagationError):
    """Newton iteration on Kepler's equation exhausted its iteration bound."""

    code = 7
    stage = "kepler"


class UnsupportedRegimeError(PropagationError):
    """Deep-space object; SDP4 is not implemented."""

    code = 8
    stage = "regime"
