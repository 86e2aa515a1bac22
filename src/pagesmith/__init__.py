"""Pagesmith - layout composition and template rendering for static sites."""

__version__ = "0.1.0"
