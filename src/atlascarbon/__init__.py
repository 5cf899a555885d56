# src/atlascarbon/__init__.py
"""Carbon footprint estimation for MongoDB Atlas database fleets."""

__version__ = "0.3.0"
