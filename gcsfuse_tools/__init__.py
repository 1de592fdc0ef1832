"""Mount helper, build and packaging tools for the gcsfuse file system."""

__version__ = "0.1.0"