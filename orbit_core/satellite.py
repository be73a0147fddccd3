"""
Satellite Handle

Ties a parsed TLE record to its gravity model and SGP4 initialization state
and exposes propagation by elapsed minutes, by datetime or by Julian date.

A Satellite is built once and never changes afterwards: propagation reads
its state and writes nothing back, so one instance can be shared between
threads.
"""

import logging
import numbers
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple, Union

import numpy as np

from orbit_core.elements import initialize
from orbit_core.errors import PropagationError
from orbit_core.gravity import GravityModel, constants, resolve_model
from orbit_core.propagator import PositionVelocity, propagate_elements
from orbit_core.timeutils import (
    datetime_to_jd,
    epoch_to_datetime,
    epoch_to_jd,
    full_epoch_year,
    minutes_between,
)
from orbit_core.tle_parser import RawElements, parse_lines, parse_tle

logger = logging.getLogger(__name__)

TimeLike = Union[float, int, datetime]


class Satellite:
    """
    A TLE record prepared for SGP4 propagation.

    Attributes:
        name: Title line of the record ("" when absent); metadata only
        raw: Elements as parsed from the TLE text
        gravity_model: GravityModel the state was built with
        gravity: Shared GravityConst of that model
        elements: Canonical elements (radians, rad/min)
        init_state: SGP4 initialization state
        epoch: Epoch as a UTC datetime
        jdsatepoch, jdsatepochF: Epoch as a two-part Julian date
    """

    def __init__(self, raw: RawElements,
                 gravity_model: Union[GravityModel, str] = GravityModel.WGS72,
                 name: str = ""):
        self.name = name
        self.raw = raw
        self.gravity_model = resolve_model(gravity_model)
        self.gravity = constants(self.gravity_model)
        self.elements, self.init_state = initialize(raw, self.gravity)

        self.epoch_year = full_epoch_year(raw.epoch_year)
        self.epoch = epoch_to_datetime(self.epoch_year, raw.epoch_days)
        self.jdsatepoch, self.jdsatepochF = epoch_to_jd(self.epoch_year, raw.epoch_days)

        logger.debug(
            f"Loaded satellite {raw.satnum} ({name or 'unnamed'}) "
            f"epoch={self.epoch.isoformat()} model={self.gravity_model.value}"
        )

    @classmethod
    def from_tle(cls, text: str,
                 gravity_model: Union[GravityModel, str] = GravityModel.WGS72,
                 name: Optional[str] = None,
                 verify_checksum: bool = False) -> "Satellite":
        """
        Build a satellite from TLE text.

        Args:
            text: Two data lines, optionally preceded by a title line
            gravity_model: Gravity model identifier
            name: Overrides the title line when given
            verify_checksum: Reject lines with a wrong checksum

        Returns:
            Satellite

        Raises:
            TLEFormatError: If the text is malformed
            InvalidElementsError: If the elements cannot describe an orbit
        """
        title, raw = parse_tle(text, verify_checksum=verify_checksum)
        return cls(raw, gravity_model, name if name is not None else title)

    @classmethod
    def from_lines(cls, line1: str, line2: str,
                   gravity_model: Union[GravityModel, str] = GravityModel.WGS72,
                   name: str = "",
                   verify_checksum: bool = False) -> "Satellite":
        """Build a satellite from its two data lines."""
        raw = parse_lines(line1, line2, verify_checksum=verify_checksum)
        return cls(raw, gravity_model, name)

    @property
    def satnum(self) -> int:
        return self.raw.satnum

    @property
    def period_minutes(self) -> float:
        return self.init_state.period_minutes

    @property
    def is_deep_space(self) -> bool:
        return self.init_state.is_deep_space

    @property
    def perigee_altitude_km(self) -> float:
        return self.init_state.altp * self.gravity.radius_earth_km

    @property
    def apogee_altitude_km(self) -> float:
        return self.init_state.alta * self.gravity.radius_earth_km

    def minutes_since_epoch(self, when: datetime) -> float:
        """Minutes from the epoch to a datetime (naive datetimes are UTC)."""
        jd, fr = datetime_to_jd(when)
        return minutes_between(jd, fr, self.jdsatepoch, self.jdsatepochF)

    def propagate(self, time: TimeLike) -> PositionVelocity:
        """
        Position and velocity in TEME at a given time.

        Args:
            time: Minutes since epoch, or an absolute datetime

        Returns:
            PositionVelocity (km, km/s)

        Raises:
            TypeError: If time is neither a number nor a datetime
            ValueError: If time is a NaN or infinite number of minutes
            SatelliteDecayedError: If the satellite has decayed by that time
            KeplerConvergenceError: If Kepler's equation does not converge
            UnsupportedRegimeError: If the satellite is a deep-space object
        """
        if isinstance(time, datetime):
            tsince = self.minutes_since_epoch(time)
        elif isinstance(time, numbers.Real) and not isinstance(time, bool):
            tsince = float(time)
        else:
            raise TypeError(f"time must be minutes since epoch or a datetime, not {type(time).__name__}")

        try:
            return propagate_elements(self.init_state, self.elements, self.gravity, tsince)
        except PropagationError as e:
            logger.warning(f"Satellite {self.satnum}: {e}")
            raise

    def propagate_jd(self, jd: float, fr: float = 0.0) -> PositionVelocity:
        """Propagate to a two-part Julian date (jd + fr)."""
        return self.propagate(minutes_between(jd, fr, self.jdsatepoch, self.jdsatepochF))

    def propagate_batch(self, times: Iterable[TimeLike]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Propagate to many times; a failing time does not stop the batch.

        Args:
            times: Minutes since epoch and/or datetimes

        Returns:
            Tuple of (errors, positions, velocities): an int array of error
            codes (0 on success) and (N, 3) arrays in km and km/s whose rows
            are NaN where propagation failed

        Raises:
            TypeError, ValueError: If a time is not a finite number or a
                datetime; the batch stops there
        """
        times = list(times)
        errors = np.zeros(len(times), dtype=int)
        positions = np.full((len(times), 3), np.nan)
        velocities = np.full((len(times), 3), np.nan)

        for i, time in enumerate(times):
            try:
                pv = self.propagate(time)
            except PropagationError as e:
                errors[i] = e.code
                continue
            positions[i] = pv.position
            velocities[i] = pv.velocity

        return errors, positions, velocities

    def to_dict(self) -> Dict[str, Any]:
        """Parsed elements in native TLE units plus derived quantities."""
        data = self.raw._asdict()
        data.update({
            "name": self.name,
            "epoch_datetime": self.epoch.isoformat(),
            "gravity_model": self.gravity_model.value,
            "period_minutes": self.period_minutes,
            "perigee_altitude_km": self.perigee_altitude_km,
            "apogee_altitude_km": self.apogee_altitude_km,
            "deep_space": self.is_deep_space,
        })
        return data

    def __repr__(self):
        return (f"Satellite(satnum={self.satnum}, name={self.name!r}, "
                f"epoch={self.epoch.isoformat()}, model={self.gravity_model.value})")


def from_tle(text: str, gravity_model: Union[GravityModel, str] = GravityModel.WGS72) -> Satellite:
    """Construct a Satellite from TLE text."""
    return Satellite.from_tle(text, gravity_model)
