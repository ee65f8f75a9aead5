"""
Models package — export all SQLAlchemy models.
"""

from cardnorm.models.base import Base
from cardnorm.models.card_record import CardRecord

__all__ = ["Base", "CardRecord"]
