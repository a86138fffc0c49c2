# FILE: assignment_hub/__init__.py
"""
AI Assignment Hub: assignment generation and grading core
"""
__version__ = "0.4.0"
