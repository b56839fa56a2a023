"""Question Bank Package — interview question store and ranking engine.

Invariants:
    - Package root holds only metadata (no import side-effects)
"""

__version__ = "1.0.0"
