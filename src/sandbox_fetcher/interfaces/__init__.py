"""
Interfaces Layer

Process entry points.
"""
