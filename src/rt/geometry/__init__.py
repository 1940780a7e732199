"""Geometry module for shape primitives.

Components:
    shape: ShapeKind, HitRecord, Intersection and the Shape base class
    sphere: Sphere primitive with ray-sphere intersection
    cube: Axis-aligned cube with per-face plane tests
    cylinder: Vertical cylinder with FlatPlane caps
    flat_plane: Bounded horizontal disk
    dispatch: Tagged-union dispatch and the single-ray probe

All intersection routines are Taichi functions (@ti.func) returning a
HitRecord; a miss is hit == 0. Host-side primitives expose the same test as
Shape.intersection(ray), returning None on a miss.

dispatch allocates Taichi fields and is not imported here.
"""

from .cube import CUBE_TOLERANCE, Cube, cube_face_normal, hit_cube
from .cylinder import Cylinder, hit_cylinder, hit_cylinder_side
from .flat_plane import FlatPlane, flat_plane_normal, hit_flat_plane
from .shape import T_MIN, HitRecord, Intersection, Shape, ShapeKind, discriminant
from .sphere import Sphere, hit_sphere

__all__ = [
    "Shape",
    "ShapeKind",
    "HitRecord",
    "Intersection",
    "discriminant",
    "T_MIN",
    "Sphere",
    "hit_sphere",
    "Cube",
    "hit_cube",
    "cube_face_normal",
    "CUBE_TOLERANCE",
    "Cylinder",
    "hit_cylinder",
    "hit_cylinder_side",
    "FlatPlane",
    "hit_flat_plane",
    "flat_plane_normal",
]
