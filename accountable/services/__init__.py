"""
Services for the Accountable India backend
"""

from .grounded_query import GroundedQueryExecutor
from .intelligence import IntelligenceService

__all__ = ["GroundedQueryExecutor", "IntelligenceService"]
