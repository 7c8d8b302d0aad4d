"""
Domain layer for LearnPortal: entities and repository interfaces, with
in-memory repository implementations for development and tests.
"""
