from filmmania.dao.base import BaseDAO
from filmmania.models import User
from filmmania.utils.time import utcnow


class UserDAO(BaseDAO):
    model = User

    def get_by_email(self, email):
        return User.query.filter_by(email=email.strip().lower()).first()

    def create(self, email, password, first_name=None, last_name=None, is_admin=False):
        user = User(
            email=email.strip().lower(),
            first_name=first_name,
            last_name=last_name,
            is_admin=is_admin,
        )
        user.set_password(password)
        return self.save(user)

    def set_subscription_status(self, user, status):
        user.subscription_status = getattr(status, "value", status)
        return self.save(user)

    def set_stripe_customer_id(self, user, customer_id):
        user.stripe_customer_id = customer_id
        return self.save(user)

    def record_login(self, user):
        user.last_login = utcnow()
        return self.save(user)
