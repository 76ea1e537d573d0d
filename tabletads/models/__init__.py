"""
Database models for tabletads.
"""

from tabletads.models.ad import Campanha, Impressao
from tabletads.models.base import Base

__all__ = [
    "Base",
    "Campanha",
    "Impressao",
]
