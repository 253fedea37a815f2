"""
Cosmic Watch
Near-Earth asteroid dashboard with a small account and alert service.
"""

__version__ = "1.0.0"
