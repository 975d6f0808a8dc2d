import logging

from sqlalchemy.exc import SQLAlchemyError

from filmmania.extensions import db

logger = logging.getLogger(__name__)


class BaseDAO:
    """
    Thin persistence layer over the shared session.

    Every write commits on its own. A failed commit is rolled back and the
    SQLAlchemyError is re-raised for the caller to translate.
    """

    model = None

    def get_by_id(self, record_id):
        if record_id is None:
            return None
        return db.session.get(self.model, record_id)

    def save(self, instance):
        db.session.add(instance)
        self._commit()
        return instance

    def _commit(self):
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(
                "Commit failed", extra={"model": self.model.__name__ if self.model else None}
            )
            raise
