"""Stay-session compression, location flows and radius of gyration for movement traces."""

__version__ = "0.1.0"
