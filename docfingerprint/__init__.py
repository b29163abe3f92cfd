"""Document access and DSL schema for content fingerprinting."""

__version__ = "0.2.0"