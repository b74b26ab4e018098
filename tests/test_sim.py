import numpy as np
import pytest

from verlet_net.sim import main, parse_args, config_from_args


def test_args_map_onto_config():
    cfg = config_from_args(parse_args(["--cols", "3", "--rows", "5", "--friction", "0.5"]))
    assert (cfg.cols, cfg.rows, cfg.friction) == (3, 5, 0.5)
    assert cfg.accuracy == 100


@pytest.mark.parametrize("solver", ["python", "numba"])
def test_headless_run(solver, capsys):
    code = main(
        ["--frames", "5", "--cols", "2", "--rows", "3", "--accuracy", "5", "--solver", solver]
    )
    out = capsys.readouterr().out
    assert code == 0
    assert "5 frames, 11 segments per frame" in out


def test_invalid_config_exits_with_error(capsys):
    assert main(["--frames", "1", "--friction", "2"]) == 2
    assert "friction" in capsys.readouterr().err


def test_renderer_projection_maps_canvas_corners():
    renderer = pytest.importorskip("verlet_net.renderer")
    m = renderer.ortho(800, 600).T

    top_left = m @ np.array([0.0, 0.0, 0.0, 1.0])
    bottom_right = m @ np.array([800.0, 600.0, 0.0, 1.0])
    assert top_left[:2] == pytest.approx([-1.0, 1.0])
    assert bottom_right[:2] == pytest.approx([1.0, -1.0])


def test_line_width_and_strand_rows_flags():
    cfg = config_from_args(parse_args(["--line-width", "1.5", "--strand-rows", "0"]))
    assert (cfg.line_width, cfg.strand_rows) == (1.5, 0)


def test_non_finite_flag_exits_with_error(capsys):
    assert main(["--frames", "1", "--spacing", "nan"]) == 2
    assert "spacing" in capsys.readouterr().err


def test_log_level_is_case_insensitive_and_checked():
    assert parse_args(["--log-level", "debug"]).log_level == "DEBUG"
    with pytest.raises(SystemExit) as excinfo:
        parse_args(["--log-level", "chatty"])
    assert excinfo.value.code == 2


def test_renderer_line_to_requires_move_to():
    renderer = pytest.importorskip("verlet_net.renderer")
    # No GL context needed for the cursor bookkeeping
    r = renderer.Renderer.__new__(renderer.Renderer)
    r.begin_frame()
    with pytest.raises(RuntimeError):
        r.line_to(1.0, 1.0)

    r.move_to(0.0, 0.0)
    r.line_to(2.0, 3.0)
    assert r._vertices == [0.0, 0.0, 2.0, 3.0]
