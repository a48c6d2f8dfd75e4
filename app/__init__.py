"""
AR model validator service
"""

__project__ = "ARModelValidator"
__version__ = "0.3.0"
