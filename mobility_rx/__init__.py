"""Mobility-Rx: energy-preserving exercise prescription engine for bed-cycle ergometry."""

__version__ = "0.1.0"
