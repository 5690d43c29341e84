"""
Seed a fresh database: tables, the head office branch and the first manager.

    python -m findules.init_db
"""

import logging

from findules.config import settings
from findules.database import Base, SessionLocal, engine
from findules.models import Branch, Role, User
from findules.security import get_password_hash

logger = logging.getLogger(__name__)

HQ_CODE = "HQ"
HQ_NAME = "Head Office"


def init_db():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        # 1. Head office
        branch = db.query(Branch).filter(Branch.branch_code == HQ_CODE).first()
        if not branch:
            branch = Branch(branch_code=HQ_CODE, branch_name=HQ_NAME, location="Headquarters")
            db.add(branch)
            db.commit()
            db.refresh(branch)
            logger.info("Branch %s created", HQ_CODE)
        else:
            logger.info("Branch %s already exists", HQ_CODE)

        # 2. Manager account
        admin = db.query(User).filter(User.email == settings.admin_email).first()
        if not admin:
            admin = User(
                name="System Administrator",
                email=settings.admin_email,
                password_hash=get_password_hash(settings.admin_password),
                role=Role.MANAGER,
                branch_id=branch.id,
            )
            db.add(admin)
            db.commit()
            logger.info("Manager %s created", settings.admin_email)
        else:
            logger.info("Manager %s already exists", settings.admin_email)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    init_db()
