"""Scene assembly: world container, camera and built-in scenes."""

from .world import World
from .camera import Camera, CameraParams
from .scenes import SCENES, Scene, load_scene

__all__ = ["World", "Camera", "CameraParams", "SCENES", "Scene", "load_scene"]
