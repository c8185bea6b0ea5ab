"""confcalc - conference registration pricing engine."""

__version__ = "0.1.0"
