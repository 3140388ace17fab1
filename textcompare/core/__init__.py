"""
Core comparison logic: data models and the diff engine.
"""
