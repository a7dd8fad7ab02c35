"""Unit tests for the exact sphere body.

Tests cover:
- Construction and validation
- Signed distance inside, on and outside the surface
- Trace steps in vacuum (Continue) and at the surface (Hit)
- Marching rays that hit and rays that escape
"""

import pytest
import taichi as ti


class TestSphereBasics:
    """Tests for SphereSDF construction."""

    def test_properties(self):
        """Test center and radius are stored."""
        from moonmarch.geometry.sphere import SphereSDF

        sphere = SphereSDF(center=(1.0, 2.0, 3.0), radius=0.5)
        assert sphere.center == (1.0, 2.0, 3.0)
        assert abs(sphere.radius - 0.5) < 1e-6

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_rejects_non_positive_radius(self, radius):
        """Test radius must be positive."""
        from moonmarch.geometry.sphere import SphereSDF

        with pytest.raises(ValueError, match="radius must be positive"):
            SphereSDF(radius=radius)


class TestSphereDistance:
    """Tests for the analytic sphere distance."""

    @pytest.mark.parametrize(
        "point,expected",
        [
            ((0.0, 0.0, 10.0), 4.0),
            ((6.0, 0.0, 0.0), 0.0),
            ((0.0, 0.0, 0.0), -6.0),
            ((0.0, 3.0, 4.0), -1.0),
        ],
    )
    def test_signed_dist(self, point, expected):
        """Test distance is negative inside, zero on and positive outside."""
        from moonmarch.geometry.sphere import SphereSDF
        from moonmarch.core.ray import vec3

        sphere = SphereSDF(radius=6.0)
        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(body: ti.template(), x: ti.f32, y: ti.f32, z: ti.f32):
            result[None] = body.signed_dist(vec3(x, y, z))

        test_kernel(sphere, *point)
        assert abs(result[None] - expected) < 1e-5


class TestSphereTraceStep:
    """Tests for single march steps."""

    def test_step_in_vacuum_continues(self):
        """Test a far step advances by the distance and transmits everything."""
        from moonmarch.geometry.sdf import TRACE_CONTINUE
        from moonmarch.geometry.sphere import SphereSDF
        from moonmarch.core.ray import vec3

        sphere = SphereSDF(radius=6.0)
        kind = ti.field(dtype=ti.i32, shape=())
        emit = ti.field(dtype=ti.math.vec3, shape=())
        normal = ti.field(dtype=ti.math.vec3, shape=())
        transmit = ti.field(dtype=ti.math.vec3, shape=())
        position = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(body: ti.template()):
            state, new_position = body.trace_step(vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 10.0))
            kind[None] = state.kind
            emit[None] = state.emit
            transmit[None] = state.transmit
            normal[None] = state.normal
            position[None] = new_position

        test_kernel(sphere)
        assert kind[None] == TRACE_CONTINUE
        e = emit[None]
        t = transmit[None]
        for i in range(3):
            assert e[i] == 0.0
            assert t[i] == 1.0
            assert normal[None][i] == 0.0
        p = position[None]
        assert abs(p[2] - 6.0) < 1e-5

    def test_step_at_surface_hits(self):
        """Test a step within the threshold reports a hit with a radial normal."""
        from moonmarch.geometry.sdf import TRACE_HIT
        from moonmarch.geometry.sphere import SphereSDF
        from moonmarch.core.ray import vec3

        sphere = SphereSDF(radius=6.0, color=(0.2, 0.4, 0.6))
        kind = ti.field(dtype=ti.i32, shape=())
        emit = ti.field(dtype=ti.math.vec3, shape=())
        normal = ti.field(dtype=ti.math.vec3, shape=())
        transmit = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(body: ti.template()):
            state, _ = body.trace_step(vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 6.005))
            kind[None] = state.kind
            emit[None] = state.emit
            transmit[None] = state.transmit
            normal[None] = state.normal

        test_kernel(sphere)
        assert kind[None] == TRACE_HIT
        for i in range(3):
            assert transmit[None][i] == 1.0
        e = emit[None]
        assert abs(e[0] - 0.2) < 1e-6
        assert abs(e[1] - 0.4) < 1e-6
        assert abs(e[2] - 0.6) < 1e-6
        n = normal[None]
        assert abs(n[0]) < 1e-2
        assert abs(n[1]) < 1e-2
        assert abs(n[2] - 1.0) < 1e-3


class TestSphereMarch:
    """Tests for marching full rays against a sphere."""

    @staticmethod
    def _march(body, marcher, origin, direction, sun):
        inputs = ti.field(dtype=ti.math.vec3, shape=3)
        inputs[0] = origin
        inputs[1] = direction
        inputs[2] = sun

        light = ti.field(dtype=ti.math.vec3, shape=())
        tone = ti.field(dtype=ti.math.vec3, shape=())
        hit = ti.field(dtype=ti.i32, shape=())
        steps = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(b: ti.template(), m: ti.template()):
            result = m.march(b, inputs[0], inputs[1], inputs[2])
            light[None] = result.light
            tone[None] = result.tone
            hit[None] = result.hit
            steps[None] = result.steps

        test_kernel(body, marcher)
        return light[None], tone[None], hit[None], steps[None]

    def test_head_on_ray_hits(self):
        """Test a ray at the center hits after two steps with full sun."""
        from moonmarch.core.integrator import RayMarcher
        from moonmarch.geometry.sphere import SphereSDF

        sphere = SphereSDF(radius=6.0, color=(0.2, 0.4, 0.6))
        light, tone, hit, steps = self._march(
            sphere,
            RayMarcher(),
            (0.0, 0.0, 10.0),
            (0.0, 0.0, -1.0),
            (0.0, 0.0, -1.0),
        )

        assert hit == 1
        assert steps == 2
        # Sun shines straight onto the normal: diffuse factor 1
        assert abs(light[0] - 0.2) < 1e-3
        assert abs(light[1] - 0.4) < 1e-3
        assert abs(light[2] - 0.6) < 1e-3
        assert abs(tone[0] - 1.0) < 1e-6

    def test_back_lit_hit_uses_ambient_floor(self):
        """Test a surface facing away from the sun gets the ambient floor."""
        from moonmarch.core.integrator import AMBIENT_FLOOR, RayMarcher
        from moonmarch.geometry.sphere import SphereSDF

        sphere = SphereSDF(radius=6.0, color=(1.0, 1.0, 1.0))
        light, _, hit, _ = self._march(
            sphere,
            RayMarcher(),
            (0.0, 0.0, 10.0),
            (0.0, 0.0, -1.0),
            (0.0, 0.0, 1.0),
        )

        assert hit == 1
        for i in range(3):
            assert abs(light[i] - AMBIENT_FLOOR) < 1e-4

    def test_ray_aimed_away_escapes(self):
        """Test a ray pointing away uses the full budget and gathers nothing."""
        from moonmarch.core.integrator import MAX_STEPS, RayMarcher
        from moonmarch.geometry.sphere import SphereSDF

        sphere = SphereSDF(radius=6.0)
        light, tone, hit, steps = self._march(
            sphere,
            RayMarcher(),
            (0.0, 0.0, 10.0),
            (0.0, 0.0, 1.0),
            (0.0, 0.0, -1.0),
        )

        assert hit == 0
        assert steps == MAX_STEPS
        for i in range(3):
            assert light[i] == 0.0
            assert tone[i] == 1.0

    def test_step_budget_is_respected(self):
        """Test a marcher with a one-step budget stops before the surface."""
        from moonmarch.core.integrator import MarchSettings, RayMarcher
        from moonmarch.geometry.sphere import SphereSDF

        sphere = SphereSDF(radius=6.0)
        _, _, hit, steps = self._march(
            sphere,
            RayMarcher(MarchSettings(max_steps=1)),
            (0.0, 0.0, 10.0),
            (0.0, 0.0, -1.0),
            (0.0, 0.0, -1.0),
        )

        assert hit == 0
        assert steps == 1
