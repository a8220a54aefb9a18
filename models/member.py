from sqlalchemy import Column, String, Enum
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel
from utils.principal import Role


class Member(BaseModel, Base):
    """Staff account. Supervisors manage members, creators curate recipes."""
    __tablename__ = "members"

    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(Role, values_callable=lambda roles: [r.value for r in roles], name="member_role"),
        nullable=False,
        default=Role.CREATOR,
    )

    refresh_tokens = relationship(
        "MemberRefreshToken",
        back_populates="principal",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")
