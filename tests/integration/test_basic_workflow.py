"""Basic workflow integration tests."""

import sys
from dataclasses import dataclass, field

import pytest

sys.path.insert(0, "src")

from cowmap import BorrowScope, CowMap, CowMapSettings, DanglingReferenceError, Form


@dataclass
class Profile:
    name: str
    roles: list[str] = field(default_factory=list)

    def __to_owned__(self) -> "Profile":
        return Profile(self.name, list(self.roles))


def test_request_overrides_without_copying_defaults():
    """Borrow shared defaults, override per request, keep defaults intact."""
    defaults = {"admin": Profile("admin", ["read", "write"]), "guest": Profile("guest", ["read"])}

    with BorrowScope("request") as scope:
        profiles: CowMap[str, Profile] = CowMap(settings=CowMapSettings(_env_file=None))
        for key, profile in defaults.items():
            profiles.insert_borrowed(scope.lend(key), scope.lend(profile))

        assert profiles.stats.clones == 0
        profiles.get_mut("guest").roles.append("comment")

        assert profiles.get("guest").roles == ["read", "comment"]
        assert profiles.get("admin") is defaults["admin"]
        assert profiles.forms() == {"admin": Form.BORROWED, "guest": Form.OWNED}
        assert profiles.stats.clones == 1

    assert defaults["guest"].roles == ["read"]


def test_snapshot_then_mutate_workflow():
    """Hand out a borrowed view, mutate the view, then invalidate it."""
    with BorrowScope("config") as scope:
        base = {"timeout": 30}
        settings_map = CowMap(settings=CowMapSettings(_env_file=None))
        settings_map.insert_borrowed_value("http", scope.lend(base))
        settings_map.insert_owned("retries", 3)

        view = settings_map.borrow_fields()
        view.get_mut("http")["timeout"] = 5

        assert view.get("http") == {"timeout": 5}
        assert settings_map.get("http") == {"timeout": 30}
        assert base == {"timeout": 30}

        settings_map.insert_owned("retries", 4)

        assert view.get("http") == {"timeout": 5}
        with pytest.raises(DanglingReferenceError):
            view.get("retries")
