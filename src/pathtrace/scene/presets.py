"""Ready-made scenes.

Each factory clears the global scene storage, builds its spheres through a
fresh SceneManager and returns it.
"""

from collections.abc import Callable

from src.pathtrace.scene.manager import SceneManager

# Large sphere standing in for a ground plane
GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0


def create_default_scene() -> SceneManager:
    """Three spheres on a ground: blue diffuse center, silver and gold mirrors."""
    scene = SceneManager()
    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, albedo=(0.8, 0.8, 0.0))
    scene.add_lambertian_sphere((0.0, 0.0, -1.2), 0.5, albedo=(0.1, 0.2, 0.5))
    scene.add_metal_sphere((-1.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.8, 0.8))
    scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.6, 0.2))
    return scene


def create_single_sphere_scene() -> SceneManager:
    """A radius-0.5 diffuse sphere at (0, 0, -1) resting on a diffuse ground."""
    scene = SceneManager()
    scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, albedo=(0.5, 0.5, 0.5))
    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, albedo=(0.5, 0.5, 0.5))
    return scene


SCENES: dict[str, Callable[[], SceneManager]] = {
    "default": create_default_scene,
    "single": create_single_sphere_scene,
}


def create_scene(name: str) -> SceneManager:
    """Build a preset scene by name.

    Raises:
        ValueError: If no preset has that name.
    """
    try:
        factory = SCENES[name]
    except KeyError:
        raise ValueError(
            f"Unknown scene '{name}'. Available scenes: {', '.join(sorted(SCENES))}"
        ) from None
    return factory()
