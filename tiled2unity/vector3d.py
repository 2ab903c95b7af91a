"""Three-component coordinate handed to the geometry engine."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Vector3D:
    x: float
    y: float
    z: float
