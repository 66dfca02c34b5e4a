"""
Soft Mesh Physics Package

Per-frame mass-spring stepping for deformable bodies (soft blobs and cloth):
spring forces, semi-implicit Euler integration, box wall collisions, and for
cloth, friction, constraint relaxation and pinning.
"""

from .config import ClothSettings, PinMode, StepParameters
from .errors import (
    IndexOutOfRangeError,
    InvalidGeometryError,
    InvalidParameterError,
    NonFiniteStateError,
    SimulationError,
)
from .models import Spring, SpringNetwork, Vector3
from .solver import Corners, find_closest_corners, sim_cloth_time_step, sim_time_step

__version__ = "0.1.0"

__all__ = [
    "Vector3",
    "Spring",
    "SpringNetwork",
    "StepParameters",
    "ClothSettings",
    "PinMode",
    "Corners",
    "find_closest_corners",
    "sim_time_step",
    "sim_cloth_time_step",
    "SimulationError",
    "InvalidParameterError",
    "IndexOutOfRangeError",
    "InvalidGeometryError",
    "NonFiniteStateError",
]
