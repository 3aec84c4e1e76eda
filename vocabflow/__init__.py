"""
vocabflow: turn large documents into deduplicated vocabulary lists.
"""

__version__ = "0.1.0"
