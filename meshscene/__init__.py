"""Load glTF scenes into packed vertex, index, instance and camera data."""

__version__ = "0.1.0"