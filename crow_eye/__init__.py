"""
Crow Eye: a swarm of crows watching a forest for threats.

Crows search with grammar-grown fractal paths, keep their distance
from each other, and vote on whether to call the rangers.
"""

__version__ = "0.1.0"
