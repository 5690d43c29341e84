import enum
from sqlalchemy import Column, Integer, String, ForeignKey, Enum, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from findules.database import Base
from findules.models.organization import RecordStatus


class Role(str, enum.Enum):
    MANAGER = "MANAGER"
    BRANCH_ADMIN = "BRANCH_ADMIN"
    STAFF = "STAFF"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)

    password_hash = Column(String, nullable=False)

    role = Column(Enum(Role), default=Role.STAFF, nullable=False)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)

    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    branch = relationship("Branch", back_populates="users")

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    @property
    def branch_name(self):
        return self.branch.branch_name if self.branch else None
