"""
Shared Kernel Module
====================

Generic infrastructure used by the triage module: structured logging and
HTTP middleware.

DO NOT add complaint classification logic to the shared kernel.
"""

__version__ = "1.0.0"
