"""
SQLAlchemy ORM model for roommate posts.
"""
from sqlalchemy import Column, String, Integer, Float, Date, DateTime, Text, Boolean, Index
from sqlalchemy.sql import func

from app.database import Base


class RoommatePostModel(Base):
    """
    A "looking for a roommate" post with lifestyle answers.

    Lifestyle levels (cleanliness, noise, guests, social) are 1-5.
    The preferred location is where the poster wants to live.
    """
    __tablename__ = "roommate_posts"

    id = Column(String(50), primary_key=True)
    user_id = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="active")

    budget_min_cents = Column(Integer, nullable=True)
    budget_max_cents = Column(Integer, nullable=True)
    preferred_lat = Column(Float, nullable=True)
    preferred_lon = Column(Float, nullable=True)
    move_in_date = Column(Date, nullable=True)
    lease_months = Column(Integer, nullable=True)
    housing = Column(String(20), nullable=False, default="apartment")  # dorm, apartment, house, studio
    gender_pref = Column(String(20), nullable=False, default="any")

    cleanliness_level = Column(Integer, nullable=True)
    noise_tolerance = Column(Integer, nullable=True)
    guests_level = Column(Integer, nullable=True)
    social_level = Column(Integer, nullable=True)
    sleep = Column(String(20), nullable=True, default="flexible")  # early, late, flexible
    study_style = Column(String(50), nullable=True)
    smoking = Column(Boolean, nullable=True)
    pets = Column(Boolean, nullable=True)
    alcohol = Column(Boolean, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_roommate_posts_user', 'user_id', 'created_at'),
        Index('idx_roommate_posts_status', 'status'),
        Index('idx_roommate_posts_housing', 'housing'),
    )

    def to_dict(self) -> dict:
        """Convert to the candidate shape; preferred location maps to latitude/longitude."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description or "",
            "status": self.status,
            "budget_min_cents": self.budget_min_cents,
            "budget_max_cents": self.budget_max_cents,
            "latitude": self.preferred_lat,
            "longitude": self.preferred_lon,
            "move_in_date": self.move_in_date.isoformat() if self.move_in_date else None,
            "lease_months": self.lease_months,
            "housing": self.housing,
            "gender_pref": self.gender_pref,
            "cleanliness_level": self.cleanliness_level,
            "noise_tolerance": self.noise_tolerance,
            "guests_level": self.guests_level,
            "social_level": self.social_level,
            "sleep": self.sleep,
            "study_style": self.study_style,
            "smoking": self.smoking,
            "pets": self.pets,
            "alcohol": self.alcohol,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<RoommatePost {self.id}: {self.title}>"
