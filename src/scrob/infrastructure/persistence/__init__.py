"""Infrastructure persistence layer."""

from .database import Database
from .models import ApiTokenModel, Base, ScrobModel, UserModel
from .repositories import ApiTokenRepository, ScrobRepository, UserRepository

__all__ = [
    # Database
    "Database",
    "Base",
    # Models
    "UserModel",
    "ApiTokenModel",
    "ScrobModel",
    # Repositories
    "UserRepository",
    "ApiTokenRepository",
    "ScrobRepository",
]
