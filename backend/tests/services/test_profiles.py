import pytest

from moneymanager.services.auth import TokenService
from moneymanager.services.exceptions import AuthenticationError, ConflictError, NotFoundError
from moneymanager.services.profiles import ACTIVATION_SUBJECT, ProfileDirectory

SECRET = "k7Vq2Lx9Pm4Tz8Rb1Nw6Hc3Yf5Dg0Js2Ua"


@pytest.fixture
def directory(db, mailer):
    return ProfileDirectory(db, TokenService(SECRET), mailer)


def _token_from(mail):
    return mail["body"].split("token=", 1)[1].strip()


def test_register_creates_inactive_profile_and_mails_activation_link(directory, mailer):
    profile = directory.register("Alice", "alice@example.com", "pw-123")

    assert profile.email == "alice@example.com"
    assert not hasattr(profile, "password_hash")
    assert not directory.is_active("alice@example.com")

    assert len(mailer.sent) == 1
    mail = mailer.sent[0]
    assert mail["to"] == "alice@example.com"
    assert mail["subject"] == ACTIVATION_SUBJECT
    assert "/api/v1.0/activate?token=" in mail["body"]


def test_register_rejects_duplicate_email(directory):
    directory.register("Alice", "alice@example.com", "pw-123")
    with pytest.raises(ConflictError):
        directory.register("Other Alice", "alice@example.com", "pw-456")


def test_register_survives_mail_failure(db):
    directory = ProfileDirectory(db, TokenService(SECRET), _BrokenMailer())
    profile = directory.register("Alice", "alice@example.com", "pw-123")
    assert db.find_one("profiles", {"id": profile.id}) is not None


def test_activation_is_single_use(directory, mailer):
    directory.register("Alice", "alice@example.com", "pw-123")
    token = _token_from(mailer.sent[0])

    assert directory.activate(token)
    assert directory.is_active("alice@example.com")
    assert not directory.activate(token)


def test_activate_unknown_token(directory):
    assert not directory.activate("no-such-token")
    assert not directory.activate("")


def test_is_active_for_unknown_email(directory):
    assert not directory.is_active("nobody@example.com")


def test_authenticate(directory, mailer):
    directory.register("Alice", "alice@example.com", "pw-123")
    directory.activate(_token_from(mailer.sent[0]))

    result = directory.authenticate("alice@example.com", "pw-123")
    assert result.user.email == "alice@example.com"
    assert directory.token_service.validate(result.token, "alice@example.com")


def test_authenticate_gives_same_error_for_either_bad_factor(directory):
    directory.register("Alice", "alice@example.com", "pw-123")

    with pytest.raises(AuthenticationError) as wrong_password:
        directory.authenticate("alice@example.com", "nope")
    with pytest.raises(AuthenticationError) as unknown_email:
        directory.authenticate("bob@example.com", "pw-123")

    assert wrong_password.value.detail == unknown_email.value.detail == "Invalid email or password"


def test_get_current_for_missing_profile(directory, make_profile, db):
    profile = make_profile()
    assert directory.get_current(profile).id == profile.id

    db.delete("profiles", profile.id)
    db.commit()
    with pytest.raises(NotFoundError):
        directory.get_current(profile)


class _BrokenMailer:
    def send_email(self, *args, **kwargs):
        raise ConnectionError("smtp down")


def test_activation_mail_goes_through_dispatcher(db, mailer):
    deferred = []
    directory = ProfileDirectory(db, TokenService(SECRET), mailer,
                                 dispatch=lambda func, *args: deferred.append((func, args)))

    directory.register("Alice", "alice@example.com", "pw-123")
    assert mailer.sent == []
    assert len(deferred) == 1

    func, args = deferred[0]
    func(*args)
    assert [m["to"] for m in mailer.sent] == ["alice@example.com"]
