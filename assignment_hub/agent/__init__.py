# FILE: assignment_hub/agent/__init__.py
"""
Model-facing pipeline steps
"""
