"""Slotbook - capacity-safe booking of time-sliced resources."""

__version__ = "1.0.0"
