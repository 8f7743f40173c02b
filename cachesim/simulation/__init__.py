"""Simulation package.

Exposes the Simulation class at `cachesim.simulation` so callers can use
`from cachesim.simulation import Simulation`.
"""
from .simulation import Simulation

__all__ = ["Simulation"]
