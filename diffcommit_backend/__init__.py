"""Diff & Commit backend - interactive word-level merge service"""

__version__ = "1.0.0"
