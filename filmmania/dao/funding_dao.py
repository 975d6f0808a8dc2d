from sqlalchemy import func

from filmmania.dao.base import BaseDAO
from filmmania.extensions import db
from filmmania.models import AdminFunding, FundingStatus, User


class FundingDAO(BaseDAO):
    model = AdminFunding

    def create(self, user_id, amount, months_funded, start_date, end_date, created_by):
        funding = AdminFunding(
            user_id=user_id,
            amount=amount,
            months_funded=months_funded,
            start_date=start_date,
            end_date=end_date,
            status=FundingStatus.ACTIVE.value,
            created_by=created_by,
        )
        return self.save(funding)

    def active_totals(self):
        row = (
            db.session.query(
                func.count(AdminFunding.id),
                func.coalesce(func.sum(AdminFunding.amount), 0),
                func.count(func.distinct(AdminFunding.user_id)),
                func.coalesce(func.sum(AdminFunding.months_funded), 0),
            )
            .filter(AdminFunding.status == FundingStatus.ACTIVE.value)
            .one()
        )
        return row

    def active_with_users(self):
        return (
            db.session.query(AdminFunding, User)
            .join(User, AdminFunding.user_id == User.id)
            .filter(AdminFunding.status == FundingStatus.ACTIVE.value)
            .order_by(AdminFunding.created_at.desc())
            .all()
        )
