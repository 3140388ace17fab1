"""
Services around the engine: text I/O, samples and settings.
"""
