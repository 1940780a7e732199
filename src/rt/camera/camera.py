"""Perspective camera, its builder and the parallel render loop.

The camera builds an orthonormal basis from its view parameters:

    view   = normalize(position - look_at)     (points backward)
    right  = normalize(up_direction x view)
    up'    = view x right

For pixel (x, y) with a random jitter (jx, jy) in [0, 1):

    nx = (x + jx) / width  - 0.5
    ny = (y + jy) / height - 0.5
    direction = right * (nx * aspect * sensor) + up' * (ny * sensor) - view * focal

Row 0 is the top row of the image. ``send_rays`` runs the data-parallel map
over every pixel inside a Taichi kernel, ``sample_size`` jittered primary
rays per pixel, and stores the averaged colors in ``pixels``: a
(width * height, 3) array indexed y * width + x.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.rt.camera.camera import CameraBuilder
    >>> from src.rt.scene.demo import create_demo_scene
    >>>
    >>> camera = CameraBuilder().resolution(160, 90).sample_size(8).build()
    >>> camera.send_rays(create_demo_scene())
    >>> camera.write_to_ppm("out.ppm")
"""

import math
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.rt.core.color import DEFAULT_GAMMA
from src.rt.core.integrator import sample_color
from src.rt.geometry.shape import Vec3, to_point
from src.rt.output.export import save_png_from_array, save_ppm_from_array

if TYPE_CHECKING:
    from src.rt.scene.scene import Scene

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Type alias for progress callback
# Callback receives (samples_done, samples_total)
ProgressCallback = Callable[[int, int], None]

# =============================================================================
# Camera Defaults
# =============================================================================

DEFAULT_SAMPLE_SIZE = 1000
DEFAULT_POSITION = (1.0, 0.5, 0.0)
DEFAULT_LOOK_AT = (0.0, 0.0, 0.0)
DEFAULT_UP_DIRECTION = (0.0, -1.0, 0.0)
DEFAULT_FOCAL_LENGTH = 0.5
DEFAULT_SENSOR_WIDTH = 1.0
DEFAULT_RESOLUTION = (1600, 900)

# Maximum supported image dimensions (render buffer is preallocated)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_view = ti.Vector.field(3, dtype=ti.f32, shape=())

# Per-pixel color sums, indexed [x, y]
_pixel_sums = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Single-direction probe output
_direction_probe = ti.Vector.field(3, dtype=ti.f32, shape=())


def compute_basis(
    position: Vec3,
    look_at: Vec3,
    up_direction: Vec3,
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Build the camera's orthonormal basis.

    Args:
        position: Camera position.
        look_at: Point the camera faces.
        up_direction: Approximate up vector (need not be orthogonal to the view).

    Returns:
        Tuple (view, right, up) of unit vectors; view points from look_at
        toward the camera.

    Raises:
        ValueError: If position equals look_at or up is parallel to the view.
    """
    view = np.asarray(position, dtype=np.float64) - np.asarray(look_at, dtype=np.float64)
    view_norm = np.linalg.norm(view)
    if view_norm == 0.0:
        raise ValueError("Camera position and look_at must differ")
    view = view / view_norm

    right = np.cross(np.asarray(up_direction, dtype=np.float64), view)
    right_norm = np.linalg.norm(right)
    if right_norm == 0.0:
        raise ValueError("Camera up direction must not be parallel to the view direction")
    right = right / right_norm

    up = np.cross(view, right)
    return view, right, up


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def ray_direction(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    aspect_ratio: ti.f32,
    focal_length: ti.f32,
    sensor_width: ti.f32,
) -> vec3:
    """Jittered primary ray direction through pixel (x, y).

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        aspect_ratio: width / height.
        focal_length: Distance from the eye to the sensor plane.
        sensor_width: Sensor extent scaling the normalized coordinates.

    Returns:
        The (unnormalized) direction in world space.
    """
    jitter_x = ti.random(ti.f32)
    jitter_y = ti.random(ti.f32)

    nx = (ti.cast(x, ti.f32) + jitter_x) / ti.cast(width, ti.f32) - 0.5
    ny = (ti.cast(y, ti.f32) + jitter_y) / ti.cast(height, ti.f32) - 0.5

    return (
        _camera_right[None] * (nx * aspect_ratio * sensor_width)
        + _camera_up[None] * (ny * sensor_width)
        - _camera_view[None] * focal_length
    )


@ti.kernel
def _probe_direction(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    aspect_ratio: ti.f32,
    focal_length: ti.f32,
    sensor_width: ti.f32,
):
    _direction_probe[None] = ray_direction(
        x, y, width, height, aspect_ratio, focal_length, sensor_width
    )


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _clear_pixel_sums(width: ti.i32, height: ti.i32):
    for x, y in ti.ndrange(width, height):
        _pixel_sums[x, y] = vec3(0.0, 0.0, 0.0)


@ti.kernel
def _render_batch(
    width: ti.i32,
    height: ti.i32,
    num_samples: ti.i32,
    aspect_ratio: ti.f32,
    focal_length: ti.f32,
    sensor_width: ti.f32,
):
    """Add num_samples traced samples to every pixel's color sum.

    The pixel loop is the parallel map; samples and secondary rays are
    serial per pixel.
    """
    for x, y in ti.ndrange(width, height):
        origin = _camera_position[None]
        total = vec3(0.0, 0.0, 0.0)

        for _ in range(num_samples):
            direction = ray_direction(
                x, y, width, height, aspect_ratio, focal_length, sensor_width
            )
            color = sample_color(origin, direction)

            # Drop NaN/Inf samples
            for c in ti.static(range(3)):
                if tm.isnan(color[c]) or tm.isinf(color[c]):
                    color[c] = 0.0

            total += color

        _pixel_sums[x, y] += total


# =============================================================================
# Camera
# =============================================================================


class Camera:
    """A configured perspective camera and its pixel buffer.

    Build instances with CameraBuilder. ``aspect_ratio`` and ``fov`` are
    derived from ``resolution`` and ``sensor_width``/``focal_length``.

    Attributes:
        sample_size: Primary rays per pixel.
        position: Camera position.
        look_at: Point the camera faces.
        up_direction: Approximate up vector.
        resolution: (width, height) in pixels.
        aspect_ratio: width / height.
        focal_length: Distance from the eye to the sensor plane.
        sensor_width: Sensor size.
        fov: Field of view in radians, 2 * atan(sensor_width / (2 * focal_length)).
        pixels: Linear colors of shape (width * height, 3) on the 0-255 scale,
            filled by send_rays.
    """

    def __init__(
        self,
        sample_size: int,
        position: Vec3,
        look_at: Vec3,
        up_direction: Vec3,
        resolution: tuple[int, int],
        focal_length: float,
        sensor_width: float,
    ) -> None:
        self.sample_size = int(sample_size)
        self.position = to_point(position)
        self.look_at = to_point(look_at)
        self.up_direction = to_point(up_direction)
        self.resolution = (int(resolution[0]), int(resolution[1]))
        self.focal_length = float(focal_length)
        self.sensor_width = float(sensor_width)
        self.aspect_ratio = self.resolution[0] / self.resolution[1]
        self.fov = 2.0 * math.atan(self.sensor_width / (2.0 * self.focal_length))
        self.pixels: npt.NDArray[np.float32] = np.zeros(
            (self.width * self.height, 3), dtype=np.float32
        )

    @property
    def width(self) -> int:
        """Image width in pixels."""
        return self.resolution[0]

    @property
    def height(self) -> int:
        """Image height in pixels."""
        return self.resolution[1]

    def _upload(self) -> None:
        """Write the camera basis into the Taichi fields."""
        view, right, up = compute_basis(self.position, self.look_at, self.up_direction)
        _camera_position[None] = self.position
        _camera_view[None] = view.tolist()
        _camera_right[None] = right.tolist()
        _camera_up[None] = up.tolist()

    def _check_dimensions(self) -> None:
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )

    def ray_direction(self, x: int, y: int) -> npt.NDArray[np.float32]:
        """Compute one jittered primary ray direction for pixel (x, y).

        Args:
            x: Pixel column (0 = left).
            y: Pixel row (0 = top).

        Returns:
            The unnormalized world-space direction.
        """
        self._upload()
        _probe_direction(
            x,
            y,
            self.width,
            self.height,
            self.aspect_ratio,
            self.focal_length,
            self.sensor_width,
        )
        return np.asarray(_direction_probe[None].to_numpy(), dtype=np.float32)

    def send_rays(
        self,
        scene: "Scene",
        batch_size: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the scene into ``pixels``.

        Every pixel gets ``sample_size`` jittered primary rays; their resolved
        colors are summed and divided by ``sample_size``. Samples are rendered
        in batches so that progress can be reported.

        Args:
            scene: The scene to render. It is uploaded to Taichi storage.
            batch_size: Samples per pixel per kernel launch (default: all).
            callback: Optional callback called after each batch with
                (samples_done, sample_size).

        Raises:
            ValueError: If the resolution exceeds the supported maximum.
        """
        self._check_dimensions()
        scene.upload()
        self._upload()

        total = max(self.sample_size, 1)
        batch = total if batch_size is None else max(1, batch_size)

        _clear_pixel_sums(self.width, self.height)

        done = 0
        while done < total:
            count = min(batch, total - done)
            _render_batch(
                self.width,
                self.height,
                count,
                self.aspect_ratio,
                self.focal_length,
                self.sensor_width,
            )
            done += count

            if callback is not None:
                callback(done, total)

        # (width, height, 3) -> row-major (height * width, 3)
        sums = _pixel_sums.to_numpy()[: self.width, : self.height, :]
        image = np.transpose(sums, (1, 0, 2)) / float(total)
        self.pixels = image.reshape(self.width * self.height, 3).astype(np.float32)

    def pixel(self, x: int, y: int) -> tuple[float, float, float]:
        """Color of pixel (x, y) from the last render."""
        r, g, b = self.pixels[y * self.width + x]
        return (float(r), float(g), float(b))

    def write_to_ppm(self, filepath: str | Path, gamma: float = DEFAULT_GAMMA) -> None:
        """Write the pixels as a gamma corrected P3 PPM file.

        Raises:
            OSError: If the file cannot be written.
        """
        save_ppm_from_array(self.pixels, self.width, self.height, filepath, gamma=gamma)

    def save_png(self, filepath: str | Path, gamma: float = DEFAULT_GAMMA) -> None:
        """Write the pixels as a gamma corrected 8-bit PNG file.

        Raises:
            OSError: If the file cannot be written.
        """
        save_png_from_array(self.pixels, self.width, self.height, filepath, gamma=gamma)

    def __repr__(self) -> str:
        return (
            f"Camera(resolution={self.resolution}, sample_size={self.sample_size}, "
            f"position={self.position}, look_at={self.look_at})"
        )


class CameraBuilder:
    """Fluent builder for Camera.

    Every setter is optional and returns the builder. ``build`` fills unset
    fields with the DEFAULT_* values.

    Example:
        >>> camera = (
        ...     CameraBuilder()
        ...     .sample_size(16)
        ...     .position_by_coordinates(0.0, -3.0, 2.0)
        ...     .look_at(0.0, 0.0, -5.0)
        ...     .resolution(320, 180)
        ...     .build()
        ... )
    """

    def __init__(self) -> None:
        self._sample_size: int | None = None
        self._position: Vec3 | None = None
        self._look_at: Vec3 | None = None
        self._up_direction: Vec3 | None = None
        self._resolution: tuple[int, int] | None = None
        self._focal_length: float | None = None
        self._sensor_width: float | None = None

    def sample_size(self, sample_size: int) -> "CameraBuilder":
        self._sample_size = sample_size
        return self

    def position_by_coordinates(self, x: float, y: float, z: float) -> "CameraBuilder":
        self._position = (float(x), float(y), float(z))
        return self

    def look_at(self, x: float, y: float, z: float) -> "CameraBuilder":
        self._look_at = (float(x), float(y), float(z))
        return self

    def up_direction_by_coordinates(self, x: float, y: float, z: float) -> "CameraBuilder":
        self._up_direction = (float(x), float(y), float(z))
        return self

    def resolution(self, width: int, height: int) -> "CameraBuilder":
        self._resolution = (width, height)
        return self

    def focal_length(self, focal_length: float) -> "CameraBuilder":
        self._focal_length = focal_length
        return self

    def sensor_width(self, sensor_width: float) -> "CameraBuilder":
        self._sensor_width = sensor_width
        return self

    def build(self) -> Camera:
        """Create the Camera, using defaults for every unset field."""

        def pick(value, default):
            return default if value is None else value

        return Camera(
            sample_size=pick(self._sample_size, DEFAULT_SAMPLE_SIZE),
            position=pick(self._position, DEFAULT_POSITION),
            look_at=pick(self._look_at, DEFAULT_LOOK_AT),
            up_direction=pick(self._up_direction, DEFAULT_UP_DIRECTION),
            resolution=pick(self._resolution, DEFAULT_RESOLUTION),
            focal_length=pick(self._focal_length, DEFAULT_FOCAL_LENGTH),
            sensor_width=pick(self._sensor_width, DEFAULT_SENSOR_WIDTH),
        )
