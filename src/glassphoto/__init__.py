"""Glass Photo - sample smart-glasses app for photo capture and viewing."""

__version__ = "0.1.0"

from glassphoto.config import Config, load_config

__all__ = ["Config", "load_config", "__version__"]
