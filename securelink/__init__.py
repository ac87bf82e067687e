"""SecureLink — URL safety checks backed by Google Safe Browsing."""

__version__ = "1.0.0"
