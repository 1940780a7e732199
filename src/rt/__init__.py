"""Taichi-based offline ray tracer.

This package renders scenes of simple primitives with a stylized recursive
path tracer running in Taichi kernels, with support for:
- Spheres, axis-aligned cubes, vertical cylinders and flat disks
- Light, diffusive, glossy and reflective textures
- Per-depth fan-out of secondary rays with brightness boosts
- Jittered per-pixel sampling and PPM/PNG output

Subpackages:
    core: Ray utilities, colors, the path tracer and the host-side ray
    geometry: Shape primitives and intersection algorithms
    materials: Texture variants and scattering directions
    scene: Scene container, storage fields and the demo scene
    camera: Camera, CameraBuilder and the render loop
    output: PPM and PNG export
"""

__version__ = "0.1.0"
