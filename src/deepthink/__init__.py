"""deepthink: causal graph analysis engine."""

__version__ = "0.1.0"
