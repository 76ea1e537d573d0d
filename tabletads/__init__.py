"""
tabletads - ad playlist delivery and impression tracking for in-vehicle tablets.
"""

__version__ = "0.1.0"
