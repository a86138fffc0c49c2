# FILE: assignment_hub/services/__init__.py
"""
Stores and pure services behind the generation pipeline
"""
