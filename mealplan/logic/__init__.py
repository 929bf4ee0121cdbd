"""Core business logic layer.

Subpackages:
- planning: plan file naming, recipe reconciliation, auto-fill
- sync: the plan synchronization engine and its debounced save
"""
__all__ = ["planning", "sync"]
