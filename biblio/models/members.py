from sqlalchemy import Column, Integer, String, Text, DateTime, Enum as SQLAlchemyEnum
from sqlalchemy.sql import func
from . import Base
import enum


class MemberStatus(str, enum.Enum):
    ACTIVE = 'active'
    INACTIVE = 'inactive'


class Member(Base):
    __tablename__ = 'members'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(32), nullable=False)
    address = Column(Text, nullable=False)
    status = Column(
        SQLAlchemyEnum(MemberStatus, values_callable=lambda e: [m.value for m in e]),
        default=MemberStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime(timezone=True), default=func.now())

    def __repr__(self):
        return f"<Member {self.id} {self.email}>"
