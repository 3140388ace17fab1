"""
Text comparison toolkit.

Computes line-level and character-level differences between two texts.
"""

__version__ = "1.0.0"
