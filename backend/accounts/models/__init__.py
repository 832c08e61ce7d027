from accounts.models.email_verification import EmailVerification
from accounts.models.user import User, UserRole

__all__ = [
    "EmailVerification",
    "User",
    "UserRole",
]
