"""
Refresh token records, one table per principal kind.
Fields:
- id (uuid primary key)
- token (the signed refresh JWT itself, unique)
- principal_id (FK to users.id / members.id, cascade on delete)
- expiry_date (from the token's exp claim)
- created_at, updated_at
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class UserRefreshToken(BaseModel, Base):
    __tablename__ = "user_refresh_tokens"

    token = Column(Text, nullable=False, unique=True)
    principal_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expiry_date = Column(DateTime, nullable=False)

    principal = relationship("User", back_populates="refresh_tokens")

    __table_args__ = (
        Index("ix_user_refresh_tokens_expiry_date", "expiry_date"),
    )

    def __repr__(self):
        return f"<UserRefreshToken id={self.id} principal={self.principal_id}>"


class MemberRefreshToken(BaseModel, Base):
    __tablename__ = "member_refresh_tokens"

    token = Column(Text, nullable=False, unique=True)
    principal_id = Column(String(36), ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)
    expiry_date = Column(DateTime, nullable=False)

    principal = relationship("Member", back_populates="refresh_tokens")

    __table_args__ = (
        Index("ix_member_refresh_tokens_expiry_date", "expiry_date"),
    )

    def __repr__(self):
        return f"<MemberRefreshToken id={self.id} principal={self.principal_id}>"
