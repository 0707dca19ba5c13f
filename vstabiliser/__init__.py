"""Video stabiliser interface, parameters and command serialisation, with a pass-through implementation."""

__version__ = "2.6.0"

__all__ = ["custom", "params", "stabiliser"]