"""AgroSage: role-based agricultural dashboard backed by generative-AI flows."""

__version__ = "1.0.0"
