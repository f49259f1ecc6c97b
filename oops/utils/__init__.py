"""
Oops Utils - Fuzzy matching, executable lookup, logging and redaction.
"""
