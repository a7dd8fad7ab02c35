"""Unit tests for the ray march integrator.

Tests cover:
- March settings validation
- Sun setup and normalization
- Readiness checks before rendering
- Single-ray tracing from Python
- Fragment rendering into a pixel buffer
"""

import dataclasses
import math

import numpy as np
import pytest


class TestMarchSettings:
    """Tests for the march settings record."""

    def test_defaults(self):
        """Test default step budget and ambient floor."""
        from moonmarch.core.integrator import MarchSettings

        settings = MarchSettings()
        assert settings.max_steps == 50
        assert settings.ambient_floor == 0.05

    @pytest.mark.parametrize("max_steps", [0, -10])
    def test_rejects_non_positive_steps(self, max_steps):
        """Test the step budget must be positive."""
        from moonmarch.core.integrator import MarchSettings

        with pytest.raises(ValueError, match="max_steps must be positive"):
            MarchSettings(max_steps=max_steps)

    def test_frozen(self):
        """Test settings cannot change after a marcher is built."""
        from moonmarch.core.integrator import MarchSettings, RayMarcher

        marcher = RayMarcher(MarchSettings(max_steps=12))
        assert marcher.settings.max_steps == 12
        with pytest.raises(dataclasses.FrozenInstanceError):
            marcher.settings.max_steps = 5


class TestSun:
    """Tests for sun direction setup."""

    def test_direction_is_normalized(self):
        """Test the stored sun direction has unit length."""
        from moonmarch.core.integrator import get_sun_direction, setup_sun

        setup_sun((0.5, 0.2, 0.0))
        sun = get_sun_direction()
        length = math.sqrt(0.5**2 + 0.2**2)

        assert sun == pytest.approx((0.5 / length, 0.2 / length, 0.0), abs=1e-6)

    def test_zero_direction_rejected(self):
        """Test a zero sun direction is a configuration error."""
        from moonmarch.core.integrator import setup_sun

        with pytest.raises(ValueError, match="non-zero"):
            setup_sun((0.0, 0.0, 0.0))

    def test_normalize_without_setup(self):
        """Test normalizing a direction leaves the configured sun alone."""
        from moonmarch.core.integrator import (
            get_sun_direction,
            normalize_sun_direction,
            setup_sun,
        )

        setup_sun((0.0, 0.0, -1.0))

        assert normalize_sun_direction((3.0, 0.0, 4.0)) == pytest.approx((0.6, 0.0, 0.8))
        assert get_sun_direction() == pytest.approx((0.0, 0.0, -1.0))
        with pytest.raises(ValueError, match="non-zero"):
            normalize_sun_direction((0.0, 0.0, 0.0))


class TestReadiness:
    """Tests for configuration checks before kernels run."""

    @staticmethod
    def _buffers():
        from moonmarch.camera.multisample import rasterize

        fragments = rasterize(2, 2)
        image = np.zeros((2, 2, 3), dtype=np.float32)
        return fragments, image

    def test_render_without_camera(self):
        """Test rendering before setup_camera raises."""
        from moonmarch.core.integrator import RayMarcher, setup_sun
        from moonmarch.geometry.sphere import SphereSDF

        setup_sun((0.0, 0.0, -1.0))
        fragments, image = self._buffers()

        with pytest.raises(RuntimeError, match="Camera not set up"):
            RayMarcher().render_fragments(SphereSDF(), fragments.screen, fragments.pixels, image)

    def test_render_without_sun(self):
        """Test rendering before setup_sun raises."""
        from moonmarch.camera.pinhole import PinholeCamera, setup_camera
        from moonmarch.core.integrator import RayMarcher
        from moonmarch.geometry.sphere import SphereSDF

        setup_camera(PinholeCamera())
        fragments, image = self._buffers()

        with pytest.raises(RuntimeError, match="Sun not set up"):
            RayMarcher().render_fragments(SphereSDF(), fragments.screen, fragments.pixels, image)

    def test_trace_ray_without_sun(self):
        """Test single-ray tracing needs the sun."""
        from moonmarch.core.integrator import RayMarcher
        from moonmarch.geometry.sphere import SphereSDF

        with pytest.raises(RuntimeError, match="Sun not set up"):
            RayMarcher().trace_ray(SphereSDF(), (0.0, 0.0, 10.0), (0.0, 0.0, -1.0))


class TestTraceRay:
    """Tests for single-ray tracing from Python."""

    def test_head_on_hit(self):
        """Test a ray straight at a lit sphere returns its color."""
        from moonmarch.core.integrator import RayMarcher, setup_sun
        from moonmarch.geometry.sphere import SphereSDF

        setup_sun((0.0, 0.0, -1.0))
        color = RayMarcher().trace_ray(
            SphereSDF(radius=6.0, color=(0.2, 0.4, 0.6)),
            (0.0, 0.0, 10.0),
            (0.0, 0.0, -3.0),
        )

        assert color == pytest.approx((0.2, 0.4, 0.6), abs=1e-3)

    def test_miss_is_black(self):
        """Test a ray missing a sphere in vacuum gathers nothing."""
        from moonmarch.core.integrator import RayMarcher, setup_sun
        from moonmarch.geometry.sphere import SphereSDF

        setup_sun((0.0, 0.0, -1.0))
        color = RayMarcher().trace_ray(SphereSDF(radius=1.0), (0.0, 0.0, 10.0), (1.0, 0.0, 0.0))

        assert color == (0.0, 0.0, 0.0)

    def test_zero_direction_rejected(self):
        """Test a zero ray direction is rejected."""
        from moonmarch.core.integrator import RayMarcher, setup_sun
        from moonmarch.geometry.sphere import SphereSDF

        setup_sun((0.0, 0.0, -1.0))
        with pytest.raises(ValueError, match="non-zero"):
            RayMarcher().trace_ray(SphereSDF(), (0.0, 0.0, 10.0), (0.0, 0.0, 0.0))


class TestRenderFragments:
    """Tests for accumulating fragments into a pixel buffer."""

    def test_accumulates_per_pixel(self):
        """Test each fragment adds to its own pixel."""
        from moonmarch.camera.multisample import rasterize
        from moonmarch.camera.pinhole import PinholeCamera, setup_camera
        from moonmarch.core.integrator import RayMarcher, setup_sun
        from moonmarch.geometry.sphere import SphereSDF

        setup_camera(PinholeCamera())
        setup_sun((0.0, 0.0, -1.0))
        sphere = SphereSDF(radius=6.0, color=(1.0, 1.0, 1.0))
        fragments = rasterize(4, 4, samples=2)
        image = np.zeros((4, 4, 3), dtype=np.float32)

        RayMarcher().render_fragments(sphere, fragments.screen, fragments.pixels, image)

        # Center pixel hits the sphere twice; corner rays miss it
        assert image[2, 2, 0] > 1.0
        assert image[0, 0, 0] == 0.0
        assert np.all(np.isfinite(image))

    def test_empty_batch_is_noop(self):
        """Test an empty work list leaves the buffer untouched."""
        from moonmarch.camera.pinhole import PinholeCamera, setup_camera
        from moonmarch.core.integrator import RayMarcher, setup_sun
        from moonmarch.geometry.sphere import SphereSDF

        setup_camera(PinholeCamera())
        setup_sun((0.0, 0.0, -1.0))
        image = np.full((2, 2, 3), 0.5, dtype=np.float32)

        RayMarcher().render_fragments(
            SphereSDF(),
            np.zeros((0, 2), dtype=np.float32),
            np.zeros((0, 2), dtype=np.int32),
            image,
        )

        assert np.all(image == 0.5)
