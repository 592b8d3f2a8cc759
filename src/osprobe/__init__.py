"""osprobe: infer a client's OS family from weak, independent signals."""

__version__ = "0.1.0"
