"""
Study 01: Threat Patrol

A small flock over a patch of forest with a handful of threats.

Questions to explore:
- How quickly do veterans switch from direct flight to fractal search?
- Does crowding keep the flock spread over the threats?
- Which fire alerts does the flock choose to escalate?
"""
