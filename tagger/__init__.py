"""
Completion-model labeling of storage tables and columns.
"""

__version__ = "0.1.0"
