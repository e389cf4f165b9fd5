"""
Command handlers for sideways.
"""
