"""docchat: chat with uploaded documents."""

__version__ = "1.0.0"
