from filmmania.dao.base import BaseDAO
from filmmania.models import Payment


class PaymentDAO(BaseDAO):
    model = Payment

    def get_by_intent_id(self, payment_intent_id):
        return Payment.query.filter_by(stripe_payment_intent_id=payment_intent_id).first()
