"""
Navigation for fractal searchers.

- fractal: Grammar-grown waypoint paths biased toward threats
"""

from .fractal import FractalPathGenerator, FractalConfig, rewrite, expand

__all__ = ["FractalPathGenerator", "FractalConfig", "rewrite", "expand"]
