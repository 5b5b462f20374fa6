import math

import pytest

from fieldops.services.geospatial import Bounds, bounds_for_points, fit_camera


def test_bounds_cover_every_point() -> None:
    bounds = bounds_for_points([(18.5, 73.8), (19.1, 72.9), (12.9, 77.6)])

    assert bounds == Bounds(south=12.9, west=72.9, north=19.1, east=77.6)


def test_bounds_of_empty_point_set_raise() -> None:
    with pytest.raises(ValueError):
        bounds_for_points([])


def test_single_point_fits_at_max_zoom() -> None:
    camera = fit_camera(bounds_for_points([(18.5, 73.8)]), 1024, 768, padding=100, max_zoom=18)

    assert camera.zoom == 18
    assert camera.latitude == pytest.approx(18.5)
    assert camera.longitude == pytest.approx(73.8)
    assert camera.padding == 100


def test_wide_bounds_zoom_out_and_center() -> None:
    bounds = bounds_for_points([(10.0, 70.0), (20.0, 80.0)])

    camera = fit_camera(bounds, 1024, 768, padding=50, max_zoom=15, animate=False)

    assert 0 < camera.zoom < 15
    assert camera.longitude == pytest.approx(75.0)
    assert 10.0 < camera.latitude < 20.0
    assert camera.animate is False
    # a 10 degree span fits in 924 usable pixels at 512px tiles
    expected_x = math.log2(924 / ((10.0 / 360.0) * 512))
    assert camera.zoom <= expected_x + 1e-9


def test_zoom_never_exceeds_max_zoom_for_close_points() -> None:
    bounds = bounds_for_points([(18.5200, 73.8500), (18.5201, 73.8501)])

    camera = fit_camera(bounds, 1024, 768, padding=50, max_zoom=15)

    assert camera.zoom == 15
