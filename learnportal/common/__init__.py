"""
Common utilities shared across LearnPortal: logging, errors, validation.
"""
