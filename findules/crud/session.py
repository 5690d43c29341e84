import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from findules.exceptions import ConflictError, PersistenceError

logger = logging.getLogger(__name__)


def commit_or_raise(db: Session, action: str, duplicate_message: Optional[str] = None) -> None:
    """
    Commit the unit of work, translating store failures into domain errors.

    A version mismatch means another request changed the row first. A unique
    constraint hit becomes a conflict when ``duplicate_message`` is given.
    """
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning("Concurrent update while trying to %s", action)
        raise ConflictError("Record was modified by another request, please retry")
    except IntegrityError:
        db.rollback()
        if duplicate_message:
            logger.warning("Duplicate record while trying to %s", action)
            raise ConflictError(duplicate_message)
        logger.exception("Integrity error while trying to %s", action)
        raise PersistenceError()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Database error while trying to %s", action)
        raise PersistenceError()
