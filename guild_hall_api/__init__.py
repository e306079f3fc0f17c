"""
Top‑level package for the Guild Hall API.

This file makes ``guild_hall_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``guild_hall_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
