"""titan — detached background workers with a persistent registry."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("titan")
except PackageNotFoundError:
    __version__ = "0.1.0"  # fallback for development
