"""
Fleet quote kernel.

Domain types, typed errors, structured logging and persistence for the
fleet leasing quote system.  Pure calculations live in ``fleet_engines``;
pricing constants and default tax indices are loaded by ``fleet_config``.
"""

__version__ = "0.1.0"
