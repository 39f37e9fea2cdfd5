"""
Studies: Structured experiments for understanding.

Each study begins with observation, not hypothesis.

Study progression:
1. Threat patrol - a small flock, a handful of threats, a vote every few ticks
"""
