"""Voice Studio: configure, provision and test real-time voice AI agents."""

__version__ = "0.1.0"
