"""AttentHive: shared care coordination for pets, plants and people."""

__version__ = "0.3.0"
