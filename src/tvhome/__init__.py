"""tvhome: vendor-agnostic device control for a TV home-screen app."""

__version__ = "0.1.0"
