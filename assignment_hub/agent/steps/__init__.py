# FILE: assignment_hub/agent/steps/__init__.py
