# FILE: assignment_hub/middleware/__init__.py
