"""Stock demo scene and camera.

The demo places a red diffusive sphere, a green cylinder, a blue disk, a blue
cube and a light-yellow light sphere, viewed from slightly above.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.rt.scene.demo import create_demo_camera, create_demo_scene
    >>> scene = create_demo_scene()
    >>> camera = create_demo_camera(width=320, height=180, sample_size=16)
    >>> camera.send_rays(scene)
    >>> camera.write_to_ppm("demo.ppm")
"""

from src.rt.camera.camera import Camera, CameraBuilder
from src.rt.core.color import BLUE, GREEN, LIGHT_YELLOW, RED
from src.rt.geometry.cube import Cube
from src.rt.geometry.cylinder import Cylinder
from src.rt.geometry.flat_plane import FlatPlane
from src.rt.geometry.sphere import Sphere
from src.rt.materials.texture import Diffusive, Light
from src.rt.scene.scene import DEFAULT_BRIGHTNESS, Scene

# =============================================================================
# Demo Camera Parameters
# =============================================================================

DEMO_CAMERA_POSITION = (0.0, -3.0, 2.0)
DEMO_CAMERA_LOOK_AT = (0.0, 0.0, -5.0)
DEMO_CAMERA_UP = (0.0, 4.0, 0.0)
DEMO_FOCAL_LENGTH = 0.5
DEMO_SENSOR_WIDTH = 1.0


def create_demo_scene(brightness: float = DEFAULT_BRIGHTNESS) -> Scene:
    """Create the stock demo scene.

    Args:
        brightness: Ambient brightness (clamped into (0, 1]).

    Returns:
        A Scene with four diffusive objects and one light.
    """
    objects = [
        Sphere((0.0, -1.0, -5.0), 1.0, Diffusive(RED)),
        Cylinder((2.0, -4.0, -5.0), 1.0, 4.0, Diffusive(GREEN)),
        FlatPlane((0.0, 0.0, -5.0), 5.0, Diffusive(BLUE)),
        Cube((-2.0, -1.0, -5.0), 1.0, Diffusive(BLUE)),
        Sphere((-4.0, -7.0, 0.0), 2.0, Light(LIGHT_YELLOW)),
    ]
    return Scene(objects, brightness=brightness)


def create_demo_camera(
    width: int = 1600,
    height: int = 900,
    sample_size: int = 1000,
) -> Camera:
    """Create the camera used for the demo scene.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        sample_size: Samples per pixel.

    Returns:
        A configured Camera.
    """
    return (
        CameraBuilder()
        .sample_size(sample_size)
        .position_by_coordinates(*DEMO_CAMERA_POSITION)
        .look_at(*DEMO_CAMERA_LOOK_AT)
        .up_direction_by_coordinates(*DEMO_CAMERA_UP)
        .focal_length(DEMO_FOCAL_LENGTH)
        .sensor_width(DEMO_SENSOR_WIDTH)
        .resolution(width, height)
        .build()
    )
