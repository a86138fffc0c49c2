# FILE: assignment_hub/providers/__init__.py
"""
Generative model provider adapters
"""
