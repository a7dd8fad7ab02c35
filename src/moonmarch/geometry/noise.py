"""Seeded 3D gradient noise evaluated inside Taichi kernels.

The noise field is classic Perlin-style gradient noise: space is divided
into unit cells, each lattice corner gets a pseudo-random unit gradient
picked through a permutation table, and the eight corner contributions are
blended with a quintic fade curve. Values lie roughly in [-1, 1] and vary
smoothly, which keeps a noise-perturbed distance field continuous.

The permutation table and gradients are drawn from a NumPy generator seeded
with the caller's integer seed. Identical seeds give bit-identical samples
across runs.

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> noise = NoiseField(seed=6554)
    >>> values = noise.sample_points(np.array([[0.5, 1.25, -3.0]]))
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from moonmarch.core.ray import vec3

# Lattice period; must be a power of two for the index mask
PERMUTATION_SIZE = 256
_INDEX_MASK = PERMUTATION_SIZE - 1


@ti.func
def _fade(t: vec3) -> vec3:
    """Quintic fade curve 6t^5 - 15t^4 + 10t^3, per component."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


@ti.data_oriented
class NoiseField:
    """A seeded 3D coherent noise field.

    Attributes:
        seed: The integer seed the tables were generated from.
    """

    def __init__(self, seed: int) -> None:
        """Build permutation and gradient tables from a seed.

        Args:
            seed: Integer seed. Any value accepted by numpy.random.default_rng.
        """
        self.seed = seed

        rng = np.random.default_rng(seed)
        permutation = rng.permutation(PERMUTATION_SIZE).astype(np.int32)

        gradients = rng.normal(size=(PERMUTATION_SIZE, 3))
        gradients /= np.linalg.norm(gradients, axis=1, keepdims=True)

        # Table is doubled so chained lookups never need a second mask
        self._permutation = ti.field(dtype=ti.i32, shape=2 * PERMUTATION_SIZE)
        self._gradients = ti.Vector.field(3, dtype=ti.f32, shape=PERMUTATION_SIZE)
        self._permutation.from_numpy(np.concatenate([permutation, permutation]))
        self._gradients.from_numpy(gradients.astype(np.float32))

    @ti.func
    def _corner_gradient(self, i: ti.i32, j: ti.i32, k: ti.i32) -> vec3:
        """Pseudo-random unit gradient for lattice corner (i, j, k)."""
        h = self._permutation[i & _INDEX_MASK]
        h = self._permutation[h + (j & _INDEX_MASK)]
        h = self._permutation[h + (k & _INDEX_MASK)]
        return self._gradients[h]

    @ti.func
    def sample(self, point: vec3) -> ti.f32:
        """Evaluate the noise at a point.

        Args:
            point: Sample position in noise space.

        Returns:
            A smoothly varying value, roughly in [-1, 1]. Zero on every
            lattice point.
        """
        cell = ti.floor(point)
        frac = point - cell
        i = ti.cast(cell.x, ti.i32)
        j = ti.cast(cell.y, ti.i32)
        k = ti.cast(cell.z, ti.i32)
        fade = _fade(frac)

        accum = 0.0
        for di in ti.static(range(2)):
            for dj in ti.static(range(2)):
                for dk in ti.static(range(2)):
                    gradient = self._corner_gradient(i + di, j + dj, k + dk)
                    offset = frac - vec3(float(di), float(dj), float(dk))

                    wx = di * fade.x + (1 - di) * (1.0 - fade.x)
                    wy = dj * fade.y + (1 - dj) * (1.0 - fade.y)
                    wz = dk * fade.z + (1 - dk) * (1.0 - fade.z)

                    accum += wx * wy * wz * tm.dot(gradient, offset)

        return accum

    @ti.kernel
    def _sample_many(
        self,
        points: ti.types.ndarray(dtype=ti.f32, ndim=2),
        out: ti.types.ndarray(dtype=ti.f32, ndim=1),
    ):
        for n in range(points.shape[0]):
            out[n] = self.sample(vec3(points[n, 0], points[n, 1], points[n, 2]))

    def sample_points(self, points: npt.ArrayLike) -> npt.NDArray[np.float32]:
        """Evaluate the noise at many points from Python.

        Args:
            points: Array-like of shape (N, 3).

        Returns:
            Array of shape (N,) with dtype float32.

        Raises:
            ValueError: If points is not of shape (N, 3).
        """
        array = np.ascontiguousarray(points, dtype=np.float32)
        if array.ndim != 2 or array.shape[1] != 3:
            raise ValueError(f"Expected points of shape (N, 3), got {array.shape}")

        out = np.zeros(array.shape[0], dtype=np.float32)
        self._sample_many(array, out)
        return out
