"""Vulcan: component security guidance derived from Security Requirements Guides."""

__version__ = "0.3.0"
