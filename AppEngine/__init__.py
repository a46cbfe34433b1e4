"""App Engine.

Validates declarative app resource configurations (surveys, visualizations, product cards,
lifecycle rules) and renders them into self-contained HTML resources under a runtime
trigger context."""

from .engine import AppResourceEngine, create_engine

__version__ = "1.0.0"
__author__ = "App Engine Team"

__all__ = ["AppResourceEngine", "create_engine"]
