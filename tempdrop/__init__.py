"""
TempDrop

Temporary file sharing with expiring storage.
"""

__version__ = "1.0.0"
