"""Epidemic propagation over mobile agents on a toroidal grid."""

__version__ = "0.1.0"
