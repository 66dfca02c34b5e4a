import numpy as np
import pytest

from softmesh.config import (
    DEFAULT_FRICTION,
    DEFAULT_ITERATIONS,
    DEFAULT_PIN_INDICES,
    ClothSettings,
    PinMode,
    StepParameters,
    as_gravity,
)
from softmesh.errors import InvalidParameterError
from softmesh.models import Vector3
from softmesh.solver import Corners


def test_defaults_are_valid():
    StepParameters.defaults().validate()
    settings = ClothSettings()
    settings.validate()
    assert settings.friction == DEFAULT_FRICTION == 0.99
    assert settings.iterations == DEFAULT_ITERATIONS == 5
    assert settings.pin_indices == DEFAULT_PIN_INDICES == (20, 24)
    assert settings.pin_mode is PinMode.FIXED


def test_restitution_bounds_are_inclusive():
    StepParameters(0.01, 1.0, 0.0, 1.0, restitution=0.0).validate()
    StepParameters(0.01, 1.0, 0.0, 1.0, restitution=1.0).validate()
    with pytest.raises(InvalidParameterError):
        StepParameters(0.01, 1.0, 0.0, 1.0, restitution=-0.1).validate()


def test_non_numeric_parameter_is_rejected():
    with pytest.raises(InvalidParameterError) as info:
        StepParameters("fast", 1.0, 0.0, 1.0).validate()
    assert info.value.name == "dt"


def test_as_gravity_accepts_vectors_and_sequences():
    np.testing.assert_array_equal(as_gravity(Vector3(0, -1, 0)), [0.0, -1.0, 0.0])
    np.testing.assert_array_equal(as_gravity([1, 2, 3]), [1.0, 2.0, 3.0])
    assert as_gravity(np.array([[0.0, -9.8, 0.0]])).shape == (3,)
    with pytest.raises(InvalidParameterError):
        as_gravity((0.0, float("inf"), 0.0))
    with pytest.raises(InvalidParameterError):
        as_gravity("down")


@pytest.mark.parametrize(
    "settings",
    [
        ClothSettings(friction=-0.5),
        ClothSettings(iterations=-1),
        ClothSettings(iterations=2.5),
        ClothSettings(pin_mode="sideways"),
    ],
)
def test_invalid_cloth_settings(settings):
    with pytest.raises(InvalidParameterError):
        settings.validate()


def test_select_pins():
    corners = Corners(Vector3(-1, 0, 0), Vector3(1, 0, 0), 3, 8)

    assert ClothSettings().select_pins(corners) == (20, 24)
    assert ClothSettings(pin_indices=(1, 2, 3)).select_pins(None) == (1, 2, 3)
    assert ClothSettings(pin_mode=PinMode.CORNERS).select_pins(corners) == (3, 8)
    assert ClothSettings(pin_mode="corners").select_pins(corners) == (3, 8)
    assert ClothSettings(pin_mode=PinMode.CORNERS).select_pins(None) == ()
    assert ClothSettings(pin_mode=PinMode.NONE).select_pins(corners) == ()


def test_select_pins_deduplicates_single_corner():
    corners = Corners(Vector3(0, 0, 0), Vector3(0, 0, 0), 0, 0)
    assert ClothSettings(pin_mode=PinMode.CORNERS).select_pins(corners) == (0,)


@pytest.mark.parametrize("pins", [(20.9, 24.2), (True, 24), (20, "24"), 5, None])
def test_non_integer_pin_indices_are_rejected(pins):
    with pytest.raises(InvalidParameterError) as info:
        ClothSettings(pin_indices=pins).validate()
    assert info.value.name == "pin_indices"


def test_numpy_pin_indices_are_accepted():
    settings = ClothSettings(pin_indices=tuple(np.array([20, 24], dtype=np.int64)))
    settings.validate()
    assert settings.select_pins(None) == (20, 24)
    assert ClothSettings(pin_indices=[]).select_pins(None) == ()


def test_from_corners_freezes_located_pins():
    corners = Corners(Vector3(-1, 0, 0), Vector3(1, 0, 0), 3, 8)

    settings = ClothSettings.from_corners(corners, friction=0.9, iterations=2)
    settings.validate()

    assert settings.pin_mode is PinMode.FIXED
    assert settings.pin_indices == (3, 8)
    assert (settings.friction, settings.iterations) == (0.9, 2)
    # Later corners are ignored
    other = Corners(Vector3(-1, 0, 0), Vector3(1, 0, 0), 0, 4)
    assert settings.select_pins(other) == (3, 8)


def test_from_corners_handles_empty_and_single_particle_bodies():
    assert ClothSettings.from_corners(None).pin_indices == ()
    single = Corners(Vector3(0, 0, 0), Vector3(0, 0, 0), 0, 0)
    assert ClothSettings.from_corners(single).pin_indices == (0,)
