"""Factory Boy definition for :class:`accounts.models.user.User`."""

from __future__ import annotations

from accounts.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from accounts.models.user import User, UserRole

import factory
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"

# Low iteration count for tests; production uses scrypt.
test_hasher = WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")


class UserFactory(BaseFactory):
    """
    Build persisted :class:`accounts.models.user.User` instances.

    Notes
    -----
    - Users are active (verified) unless ``is_active=False`` is passed.
    - ``password=...`` sets the raw password; the hash is computed here.
    """

    class Meta:
        model = User

    id = None  # let autoincrement handle it
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    role = UserRole.USER
    is_active = True
    verification_token = None
    login_attempts = 0
    locked_until = None
    password_hash = factory.LazyFunction(lambda: test_hasher.hash(DEFAULT_PASSWORD))

    class Params:
        pending = factory.Trait(
            is_active=False,
            verification_token=factory.LazyFunction(lambda: "pending-token"),
        )
        admin = factory.Trait(role=UserRole.ADMIN)

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        """Hash an explicit raw password when one is given."""
        if extracted:
            obj.password_hash = test_hasher.hash(extracted)
