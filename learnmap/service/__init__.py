"""HTTP service exposing project, lookup and plugin endpoints."""

from .app import create_app, run_service

__all__ = ["create_app", "run_service"]
