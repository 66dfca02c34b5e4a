import numpy as np
import pytest

from softmesh.config import ClothSettings, PinMode, StepParameters
from softmesh.errors import IndexOutOfRangeError, InvalidParameterError
from softmesh.sim import build_body, main, run


def test_build_body():
    positions, network = build_body("cloth")
    assert positions.shape == (25, 3)
    assert len(network) == 72

    positions, network = build_body("blob")
    assert positions.shape == (1 + 6 * 12 + 1, 3)

    with pytest.raises(ValueError):
        build_body("teapot")


@pytest.mark.parametrize("body", ["cloth", "blob"])
def test_run_stays_finite_and_in_box(body):
    result = run(body, 60, StepParameters.defaults())

    assert result.error is None
    assert result.frames == 60
    assert np.isfinite(result.positions).all()
    assert (np.abs(result.positions) <= 1.0).all()


def test_run_keeps_cloth_pins():
    start, _ = build_body("cloth")
    result = run("cloth", 30, StepParameters.defaults())
    np.testing.assert_array_equal(result.positions[[20, 24]], start[[20, 24]])


def test_run_holds_located_corners_for_the_whole_run():
    start, _ = build_body("cloth")

    result = run("cloth", 120, StepParameters.defaults(), ClothSettings(pin_mode=PinMode.CORNERS))

    assert result.error is None
    np.testing.assert_array_equal(result.positions[[20, 24]], start[[20, 24]])
    # The free edge hangs below the pinned one
    assert result.positions[:5, 1].max() < start[20, 1]


def test_rejected_step_restores_snapshot():
    start, _ = build_body("cloth")
    params = StepParameters(dt=-1.0, stiffness=1.0, damping=0.0, particle_mass=1.0)

    result = run("cloth", 10, params)

    assert isinstance(result.error, InvalidParameterError)
    assert result.frames == 0
    np.testing.assert_array_equal(result.positions, start)


def test_bad_pins_stop_the_run():
    settings = ClothSettings(pin_mode=PinMode.FIXED, pin_indices=(99,))
    result = run("cloth", 10, StepParameters.defaults(), settings)
    assert isinstance(result.error, IndexOutOfRangeError)


def test_report_every(capsys):
    run("cloth", 4, StepParameters.defaults(), report_every=2)
    out = capsys.readouterr().out
    assert "[frame     2]" in out
    assert "[frame     4]" in out


def test_main(capsys):
    assert main(["--body", "blob", "--frames", "5", "--report-every", "0"]) == 0
    assert "Finished 5 frames" in capsys.readouterr().out


def test_main_reports_failure(capsys):
    assert main(["--frames", "3", "--dt", "0", "--report-every", "0"]) == 1
    assert "Stopped after 0 frames" in capsys.readouterr().out


def test_main_corner_pins(capsys):
    assert main(["--pin-mode", "corners", "--frames", "3", "--report-every", "0"]) == 0
