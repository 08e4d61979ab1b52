import pytest

from pashunetra.errors import ProviderAuthFailure
from pashunetra.session import InMemorySessionProvider, accessible_portals, can_access


@pytest.fixture
def provider():
    return InMemorySessionProvider()


def test_register_signs_the_user_in(provider):
    seen = []
    provider.on_auth_change(seen.append)
    user = provider.register_user("Asha", "Asha@Example.org", "secret1", "farmer", "Gujarat")
    assert provider.current_user() is user
    assert user.email == "asha@example.org"
    assert seen == [user]


@pytest.mark.parametrize("email,password,role,message", [
    ("not-an-email", "secret1", "farmer", "auth/invalid-email"),
    ("a@b.org", "123", "farmer", "auth/weak-password"),
    ("a@b.org", "secret1", "shepherd", "unknown role: shepherd"),
])
def test_register_validation(provider, email, password, role, message):
    with pytest.raises(ProviderAuthFailure, match=message):
        provider.register_user("X", email, password, role, "")
    assert provider.current_user() is None


def test_duplicate_email_is_rejected(provider):
    provider.register_user("A", "a@b.org", "secret1", "flw", "Punjab")
    with pytest.raises(ProviderAuthFailure, match="email-already-in-use"):
        provider.register_user("B", "A@B.org", "secret2", "farmer", "")


def test_login_and_logout(provider):
    user = provider.register_user("A", "a@b.org", "secret1", "veterinarian", "Haryana")
    provider.logout()
    assert provider.current_user() is None
    with pytest.raises(ProviderAuthFailure, match="invalid-credential"):
        provider.login("a@b.org", "wrong-password")
    assert provider.login("a@b.org", "secret1") == user


def test_unsubscribe_stops_notifications(provider):
    seen = []
    unsubscribe = provider.on_auth_change(seen.append)
    unsubscribe()
    provider.register_user("A", "a@b.org", "secret1", "farmer", "")
    assert seen == []


def test_update_profile_changes_name_and_region_only(provider):
    provider.register_user("A", "a@b.org", "secret1", "farmer", "")
    updated = provider.update_profile(display_name="Asha", region="Kerala", role="admin")
    assert (updated.display_name, updated.region, updated.role) == ("Asha", "Kerala", "farmer")
    provider.logout()
    with pytest.raises(ProviderAuthFailure):
        provider.update_profile(region="Goa")


def test_portal_access_by_role(provider):
    farmer = provider.register_user("F", "f@b.org", "secret1", "farmer", "")
    vet = provider.register_user("V", "v@b.org", "secret1", "veterinarian", "")
    assert can_access(farmer, "dashboard") and not can_access(farmer, "veterinary")
    assert not can_access(farmer, "analytics")
    assert can_access(vet, "veterinary") and not can_access(vet, "dashboard")
    assert not can_access(None, "identify")
    assert "identify" in accessible_portals(farmer)


def test_profile_edit_does_not_signal_auth_change(provider):
    provider.register_user("A", "a@b.org", "secret1", "farmer", "")
    seen = []
    provider.on_auth_change(seen.append)
    updated = provider.update_profile(region="Kerala")
    assert provider.current_user() is updated
    assert seen == []
    provider.logout()
    assert provider.login("a@b.org", "secret1").region == "Kerala"
