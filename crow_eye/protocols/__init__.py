"""
Protocols for flock-wide decisions.

- consensus: Weighted vote on escalating a threat to the rangers
"""
