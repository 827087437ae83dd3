"""
Knowledge Assistant - customer question answering over the knowledge base
"""

__version__ = "1.0.0"
