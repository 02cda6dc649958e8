import numpy as np
import pytest

from newton import NUM_PIXELS, SamplingGrid


def test_default_resolution():
    assert SamplingGrid(-4 + 4j, 8.0).num_pixels == NUM_PIXELS == 400


def test_pixel_to_complex_orientation():
    grid = SamplingGrid(-4 + 4j, 8.0)
    assert grid.step == pytest.approx(0.02)
    assert grid.pixel_to_complex(0, 0) == -4 + 4j
    z = grid.pixel_to_complex(100, 50)
    assert z.real == pytest.approx(-4 + 100 * 0.02)
    assert z.imag == pytest.approx(4 - 50 * 0.02)
    # real part grows with the column, imaginary part shrinks with the row
    assert grid.pixel_to_complex(1, 0).real > grid.pixel_to_complex(0, 0).real
    assert grid.pixel_to_complex(0, 1).imag < grid.pixel_to_complex(0, 0).imag


def test_points_match_pixel_mapping_exactly():
    grid = SamplingGrid(-1.5 + 2.25j, 3.3, num_pixels=17)
    points = grid.points()
    assert points.shape == (17, 17)
    for i in range(17):
        for j in range(17):
            assert points[j, i] == grid.pixel_to_complex(i, j)


def test_axes():
    x, y = SamplingGrid(0j, 1.0, num_pixels=4).axes()
    assert np.allclose(x, [0.0, 0.25, 0.5, 0.75])
    assert np.allclose(y, [0.0, -0.25, -0.5, -0.75])


@pytest.mark.parametrize("width, num_pixels", [(0.0, 10), (-1.0, 10), (1.0, 0)])
def test_invalid_grid(width, num_pixels):
    with pytest.raises(ValueError):
        SamplingGrid(0j, width, num_pixels)
