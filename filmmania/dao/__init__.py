from .funding_dao import FundingDAO
from .payment_dao import PaymentDAO
from .subscription_dao import SubscriptionDAO
from .user_dao import UserDAO

user_dao = UserDAO()
subscription_dao = SubscriptionDAO()
payment_dao = PaymentDAO()
funding_dao = FundingDAO()

__all__ = [
    "FundingDAO",
    "PaymentDAO",
    "SubscriptionDAO",
    "UserDAO",
    "funding_dao",
    "payment_dao",
    "subscription_dao",
    "user_dao",
]
