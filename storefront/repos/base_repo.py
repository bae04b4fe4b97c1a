# storefront/repos/base_repo.py
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.domain.errors import PersistenceError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class BaseRepo:
    def __init__(self, db: Session):
        self.db = db

    def commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            logger.exception(f"Commit failed, rolling back: {e}")
            self.db.rollback()
            raise PersistenceError("Could not save changes") from e

    def rollback(self) -> None:
        self.db.rollback()
