# FILE: assignment_hub/routes/__init__.py
"""
HTTP routers
"""
