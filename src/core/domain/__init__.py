"""Domain models and values.

Pure data structures (Pydantic v2, dataclasses): no HTTP, no CLI.
"""
