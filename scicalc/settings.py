from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AngleMode(str, Enum):
    """Unit used by sin, cos and tan."""

    DEG = "DEG"
    RAD = "RAD"

    def toggled(self) -> AngleMode:
        return AngleMode.RAD if self is AngleMode.DEG else AngleMode.DEG


@dataclass
class Settings:
    angle_mode: AngleMode = AngleMode.DEG
    precision: int = 12           # significant digits kept by display rounding
    zero_threshold: float = 1e-12

    def __post_init__(self) -> None:
        if isinstance(self.angle_mode, str) and not isinstance(self.angle_mode, AngleMode):
            self.angle_mode = AngleMode(self.angle_mode.upper())

    def validate(self) -> None:
        if self.angle_mode not in (AngleMode.DEG, AngleMode.RAD):
            raise ValueError("angle_mode must be 'DEG' or 'RAD'")
        if not (1 <= int(self.precision) <= 15):
            raise ValueError("precision must be 1..15")
        if self.zero_threshold < 0:
            raise ValueError("zero_threshold must be >= 0")
