"""
ORM models for Campus Cart database.
"""
from app.models.user import UserModel
from app.models.item import ItemModel
from app.models.roommate_post import RoommatePostModel

__all__ = ["UserModel", "ItemModel", "RoommatePostModel"]
