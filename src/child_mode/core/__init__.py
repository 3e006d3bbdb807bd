"""
Core infrastructure for Child Mode Kit: errors, logging, protocols,
runtime settings and persistence.
"""
