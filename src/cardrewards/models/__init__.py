"""Database models."""
from cardrewards.models.base import Base, BaseModel
from cardrewards.models.bonus_points_movement import BonusPointsMovement
from cardrewards.models.merchant import Merchant
from cardrewards.models.payment_method import PaymentMethod
from cardrewards.models.transaction import Transaction

__all__ = ["Base", "BaseModel", "BonusPointsMovement", "Merchant", "PaymentMethod", "Transaction"]
