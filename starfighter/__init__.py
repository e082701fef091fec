"""Headless space-combat simulation: ships, lasers, a chase camera and an asteroid field."""

__version__ = "0.1.0"