"""
HTTP routes for the Knowledge Assistant
"""
