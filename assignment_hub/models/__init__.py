# FILE: assignment_hub/models/__init__.py
"""
Pydantic models for records and request validation
"""
from assignment_hub.models.assignments import *
from assignment_hub.models.students import *
