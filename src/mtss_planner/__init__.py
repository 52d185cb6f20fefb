"""
MTSS Planner

Backend for a guided supervisor wizard: per-school assessment mapping,
MTSS tier analysis, and text-generated insights, issues and plan suggestions.
"""

__version__ = "0.1.0"
