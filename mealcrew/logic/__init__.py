"""Core business logic layer.

Subpackages:
- scaling: Adult Equivalent arithmetic
- forms: form-link lifecycle and conflict resolution between respondents
- shopping: building shopping lists from finalized selections
- generation: AI-assisted meal generation
"""
__all__ = ["scaling", "forms", "shopping", "generation"]
