"""
Utility functions module.

Time Semantics:
- A comparison captures exactly one reference instant; every window is
  derived from it and wall-clock time is never re-read mid-computation
- Day boundaries and labels are computed in an explicitly configured zone,
  never the ambient process locale or time zone
- Timestamps inside the engine are integer epoch seconds
"""
