"""Unit tests for UserRepository."""

import pytest
from accounts.models.user import UserRole
from accounts.repositories.user import UserRepository
from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` performs core persistence operations."""

    @pytest.fixture()
    def repo(self, session):
        return UserRepository(session=session)

    def test_get_by_email_is_case_insensitive(self, repo, session):
        u = UserFactory(email="alice@example.com")
        session.commit()

        fetched = repo.get_by_email("  ALICE@example.com ")
        assert fetched is not None
        assert fetched.id == u.id

    def test_exists_by_email(self, repo, session):
        UserFactory(email="bob@example.com")
        session.commit()

        assert repo.exists_by_email("bob@example.com")
        assert not repo.exists_by_email("nonexistent@example.com")

    def test_activate_transitions_once(self, repo, session):
        user = UserFactory(pending=True)

        assert repo.activate(user) is True
        assert user.is_active is True
        assert user.verification_token is None
        assert repo.activate(user) is False

    def test_add_flushes_and_get_reads_back(self, repo, session):
        user = repo.add(UserFactory.build(email="carol@example.com", role=UserRole.ADMIN))

        assert user.id is not None
        assert repo.get(user.id) is user
        assert repo.get(user.id + 1000) is None
