"""Camera models.

Components:
    camera: Perspective Camera, CameraBuilder and the parallel render loop
"""
