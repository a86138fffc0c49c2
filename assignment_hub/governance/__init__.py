# FILE: assignment_hub/governance/__init__.py
"""
Data governance helpers
"""
