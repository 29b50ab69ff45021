"""CPU path tracer for sphere scenes, built on Taichi.

This package renders scenes of spheres with diffuse and mirror materials
into 8-bit RGB images using Monte Carlo sampling:
- Recursive radiance estimation with material scattering
- Anti-aliasing by jittered supersampling
- Deterministic per-row random streams, parallel over rows
- PNG export

Subpackages:
    core: Vector math, sampling, color encoding, estimators and renderer
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian and metal scattering models
    scene: Scene storage, material catalog and preset scenes
    camera: Fixed-orientation viewport camera
    preview: Image export
"""

__version__ = "0.1.0"
