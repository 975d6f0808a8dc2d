from filmmania.dao.base import BaseDAO
from filmmania.models import Subscription


class SubscriptionDAO(BaseDAO):
    model = Subscription

    def get_by_stripe_id(self, stripe_subscription_id):
        return Subscription.query.filter_by(stripe_subscription_id=stripe_subscription_id).first()

    def latest_for_user(self, user_id):
        """The user's current subscription: the most recently created row."""
        return (
            Subscription.query.filter_by(user_id=user_id)
            .order_by(Subscription.created_at.desc())
            .first()
        )

    def list_all(self):
        return Subscription.query.order_by(Subscription.created_at.desc()).all()
