"""Multi-colony ant colony optimization over a road network with traffic rules."""

__version__ = "0.1.0"
