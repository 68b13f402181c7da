import pytest

from core.profile import InvalidCredentials, ProfileService
from integrations.redis_cache import CacheService
from schemas.models import ExperienceLevel


@pytest.fixture
def cache():
    return CacheService(None)


@pytest.fixture
def profiles(cache):
    return ProfileService(cache)


def register(profiles):
    return profiles.register(
        name="Tendai Moyo",
        email="tendai@example.co.zw",
        location="Masvingo",
        farm_size=4.5,
        primary_crops=["maize", "groundnuts"],
        experience_level=ExperienceLevel.BEGINNER,
    )


def test_register_persists_profile(profiles, cache):
    profile = register(profiles)

    assert profiles.is_authenticated
    assert profile.joined_at is not None
    assert cache.get_json("user")["email"] == "tendai@example.co.zw"

    reloaded = ProfileService(cache).load()
    assert reloaded == profile


def test_load_without_profile(profiles):
    assert profiles.load() is None
    assert not profiles.is_authenticated


def test_login_matches_stored_email(profiles, cache):
    register(profiles)
    fresh = ProfileService(cache)

    profile = fresh.login("  Tendai@Example.co.zw ")

    assert profile.name == "Tendai Moyo"
    assert fresh.is_authenticated


def test_login_with_other_email_fails(profiles, cache):
    register(profiles)
    fresh = ProfileService(cache)

    with pytest.raises(InvalidCredentials):
        fresh.login("someone@example.com")

    assert not fresh.is_authenticated


def test_login_without_profile_fails(profiles):
    with pytest.raises(InvalidCredentials):
        profiles.login("tendai@example.co.zw")


def test_update_merges_changes(profiles, cache):
    original = register(profiles)

    updated = profiles.update(location="Chiredzi")

    assert updated.location == "Chiredzi"
    assert updated.farm_size == 4.5
    assert updated.primary_crops == ["maize", "groundnuts"]
    assert updated.id == original.id
    assert cache.get_json("user")["location"] == "Chiredzi"


def test_update_requires_sign_in(profiles):
    with pytest.raises(InvalidCredentials):
        profiles.update(location="Gweru")


def test_logout_clears_stored_profile(profiles, cache):
    register(profiles)

    profiles.logout()

    assert not profiles.is_authenticated
    assert cache.get_json("user") is None


def test_custom_storage_key(cache):
    profiles = ProfileService(cache, key="farmer")
    register(profiles)

    assert cache.get_json("farmer") is not None
    assert cache.get_json("user") is None


def test_update_with_none_clears_optional_field(profiles, cache):
    register(profiles)

    updated = profiles.update(location=None)

    assert updated.location is None
    assert updated.farm_size == 4.5
    assert cache.get_json("user")["location"] is None
