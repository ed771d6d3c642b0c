"""
SQLAlchemy ORM model for users (only the fields ranking needs).
"""
from sqlalchemy import Column, String, Float, DateTime
from sqlalchemy.sql import func

from app.database import Base


class UserModel(Base):
    """A campus user and their last shared location, if any."""
    __tablename__ = "users"

    id = Column(String(50), primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    # Last known location; both null if the user never shared it
    last_latitude = Column(Float, nullable=True)
    last_longitude = Column(Float, nullable=True)
    location_updated_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "last_latitude": self.last_latitude,
            "last_longitude": self.last_longitude,
        }

    def __repr__(self):
        return f"<User {self.id}: {self.email}>"
