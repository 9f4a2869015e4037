# Infrastructure Adapters Package
from .fsrs_engine import FsrsForgettingCurve

__all__ = ["FsrsForgettingCurve"]
