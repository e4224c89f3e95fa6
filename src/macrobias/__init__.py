"""
Macro Bias - macro-driven directional bias and correlation engine.

Computes rolling USD correlations, weighted macro bias scores, tactical
per-pair actions and Spanish narratives, plus a read-only quality checker
that verifies the outputs stay consistent with each other.
"""

__version__ = "0.1.0"
