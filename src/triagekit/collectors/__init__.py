"""Argument builders for supported third-party collectors.

Currently KAPE (Kroll Artifact Parser and Extractor), acquiring into a
VHDX container named after the host.
"""

from triagekit.collectors.kape import build_collector_args

__all__ = ["build_collector_args"]
