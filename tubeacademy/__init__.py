"""
TubeAcademy - E-learning catalog client.

Cache-first catalog access, offline-tolerant watch progress, and
cache-first search over a YouTube-backed course catalog.
"""

__version__ = "0.1.0"
