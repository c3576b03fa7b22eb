import pytest
from werkzeug.security import generate_password_hash

from src.academy_ledger.academy_ledger.core.enums import Role
from src.academy_ledger.academy_ledger.core.exceptions import AuthenticationError
from src.academy_ledger.academy_ledger.users.model import User
from src.academy_ledger.academy_ledger.users.service import AuthService


def test_authenticate_returns_actor(users_repo):
    users_repo.add(User(2, "teacher.kim", "Kim Minji", generate_password_hash("secret"), Role.TEACHER))

    actor = AuthService(users_repo).authenticate(" teacher.kim ", "secret")

    assert actor.user_id == 2
    assert actor.role == Role.TEACHER
    assert actor.full_name == "Kim Minji"


@pytest.mark.parametrize("login_id,password", [("teacher.kim", "wrong"), ("nobody", "secret"), ("inactive", "secret")])
def test_authenticate_rejects_bad_credentials(users_repo, login_id, password):
    users_repo.add(User(2, "teacher.kim", "Kim Minji", generate_password_hash("secret"), Role.TEACHER))
    users_repo.add(User(3, "inactive", "Gone", generate_password_hash("secret"), Role.TEACHER, is_active=False))

    with pytest.raises(AuthenticationError):
        AuthService(users_repo).authenticate(login_id, password)


def test_placeholder_hash_never_authenticates(users_repo):
    users_repo.add(User(5, "student.park", "Park", "CHANGE_ME", Role.STUDENT))

    with pytest.raises(AuthenticationError):
        AuthService(users_repo).authenticate("student.park", "CHANGE_ME")


def test_ensure_admin_user_only_creates_the_first_admin(users_repo):
    service = AuthService(users_repo)

    assert service.ensure_admin_user(login_id="admin", password="admin123") is True
    assert service.ensure_admin_user(login_id="admin2", password="other") is False

    admins = [u for u in users_repo.users.values() if u.role == Role.ADMIN]
    assert [u.login_id for u in admins] == ["admin"]
    assert service.authenticate("admin", "admin123").role == Role.ADMIN
