"""
slotresolver - resolve a person's daily availability slot from layered roster data.
"""

__version__ = "0.1.0"
