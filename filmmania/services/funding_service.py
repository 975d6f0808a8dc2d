"""
Admin-granted subscription periods.

Funding bypasses the billing gateway entirely. Each step below commits on its
own; a failure part-way leaves the earlier writes in place.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from filmmania.dao import FundingDAO, SubscriptionDAO, UserDAO, funding_dao, subscription_dao, user_dao
from filmmania.errors import NotFoundError
from filmmania.models import AdminFunding, PlanType, Subscription, SubscriptionStatus, UserSubscriptionStatus
from filmmania.utils import time as clock

logger = logging.getLogger(__name__)

DEFAULT_MONTHS = 3


@dataclass
class FundingResult:
    funding: AdminFunding
    subscription: Subscription

    def to_dict(self):
        return {
            "funding": self.funding.to_dict(),
            "subscription": self.subscription.to_dict(),
        }


class FundingService:
    def __init__(self, users: UserDAO = user_dao, subscriptions: SubscriptionDAO = subscription_dao,
                 fundings: FundingDAO = funding_dao):
        self.users = users
        self.subscriptions = subscriptions
        self.fundings = fundings

    def grant_funding(self, user_id: str, admin_id: Optional[str], months: int = DEFAULT_MONTHS,
                      amount=0) -> FundingResult:
        """
        Grant ``months`` of subscription to a user starting now.

        An existing latest subscription gets its end date replaced (not
        extended from its old end date); otherwise a new admin-funded monthly
        subscription is created.
        """
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        start_date = clock.utcnow()
        end_date = clock.add_months(start_date, months)

        funding = self.fundings.create(
            user_id=user.id,
            amount=Decimal(str(amount or 0)),
            months_funded=months,
            start_date=start_date,
            end_date=end_date,
            created_by=admin_id,
        )

        subscription = self.subscriptions.latest_for_user(user.id)
        if subscription is not None:
            subscription.end_date = end_date
            subscription.funded_by_admin = True
            subscription.status = SubscriptionStatus.ACTIVE.value
        else:
            subscription = Subscription(
                user_id=user.id,
                status=SubscriptionStatus.ACTIVE.value,
                plan_type=PlanType.MONTHLY.value,
                start_date=start_date,
                end_date=end_date,
                funded_by_admin=True,
            )
        self.subscriptions.save(subscription)

        self.users.set_subscription_status(user, UserSubscriptionStatus.ACTIVE)

        logger.info(
            "Subscription funded by admin",
            extra={
                "user_id": user.id,
                "admin_id": admin_id,
                "months": months,
                "funding_id": funding.id,
                "subscription_id": subscription.id,
            },
        )
        return FundingResult(funding=funding, subscription=subscription)

    def funding_stats(self):
        total_funding, total_amount, total_users, total_months = self.fundings.active_totals()
        return {
            "totalFunding": total_funding,
            "totalAmount": str(Decimal(str(total_amount)).quantize(Decimal("0.01"))),
            "totalUsers": total_users,
            "totalMonths": int(total_months),
            "activeFundings": total_funding,
        }

    def funded_users(self):
        rows = []
        for funding, user in self.fundings.active_with_users():
            entry = funding.to_dict()
            entry["user"] = {
                "id": user.id,
                "email": user.email,
                "firstName": user.first_name,
                "lastName": user.last_name,
            }
            rows.append(entry)
        return rows


funding_service = FundingService()
