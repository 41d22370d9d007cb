"""Audio signal objects with generators, statistics, windowing, array tools, spectral transforms, filtering, text output and time sequences."""

__version__ = "0.1.0"