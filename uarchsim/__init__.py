"""Microarchitecture simulation components: clocking, instruction decoding, counters, branch predictors and cache prefetchers."""

__version__ = "0.1.0"