"""Actor primitives, properties and example models of concurrent and distributed protocols."""

__version__ = "0.1.0"