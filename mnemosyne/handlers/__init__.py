"""
Lambda handlers package for AWS Lambda functions.
"""
from .insights import handler as insights_handler
from .cycle import handler as cycle_handler

__all__ = ["insights_handler", "cycle_handler"]
