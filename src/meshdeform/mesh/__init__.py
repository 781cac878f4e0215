from .hemisphere import generate_hemisphere, generate_sphere
from .surface import SurfaceMesh

__all__ = ["generate_hemisphere", "generate_sphere", "SurfaceMesh"]
