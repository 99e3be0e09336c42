"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules: ``core`` (configuration, logging, storage, security,
real-time), ``schemas``, ``services`` and ``api``.
"""

from .main import app  # noqa: F401
