"""AdjusterHub: claims marketplace and back office for independent insurance adjusters."""

__version__ = "1.0.0"
