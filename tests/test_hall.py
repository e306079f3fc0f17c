"""Hall of patrons and heroes: listings and the admin hero patch.

Invariants:
    - Patrons are ordered by backer tier, heroes by contributor level
    - Hero read/update requires ``contributor.admin``
    - Raising the contributor level grants gems for every tier crossed
    - Tier 6+ contributors own the contributor pet
    - Only whitelisted item paths are writable
"""

import pytest

from guild_hall_api.app.core.config import settings
from guild_hall_api.app.services.hall_service import GEMS_PER_TIER, tier_grant
from guild_hall_api.app.services.item_catalog import CONTRIBUTOR_PET

API = "/api/v1/hall"


@pytest.fixture
def admin(make_user):
    return make_user("admin", contributor={"admin": True})


# -- tier grant ----------------------------------------------------------------

def test_tier_grant_counts_each_crossed_tier():
    assert tier_grant(3, 5) == (GEMS_PER_TIER[4] + GEMS_PER_TIER[5]) / 4
    assert tier_grant(0, 3) == 9 / 4


def test_tier_grant_is_zero_when_not_raised():
    assert tier_grant(5, 5) == 0
    assert tier_grant(5, 3) == 0


def test_tier_grant_skips_unknown_tiers():
    assert tier_grant(0, 12, {1: 4, 12: 8}) == 3.0


# -- listings ------------------------------------------------------------------

async def test_patrons_sorted_by_backer_tier(client, make_user, auth):
    low = make_user("low", backer={"tier": 1})
    high = make_user("high", backer={"tier": 9})
    make_user("plain")

    res = await client.get(f"{API}/patrons", headers=auth(low))

    assert [p["id"] for p in res.json()] == [high.id, low.id]
    assert res.json()[0]["backer"] == {"tier": 9}


async def test_patrons_are_paged(client, make_user, auth, monkeypatch):
    monkeypatch.setattr(settings, "patrons_per_page", 1)
    low = make_user("low", backer={"tier": 1})
    make_user("high", backer={"tier": 9})

    res = await client.get(f"{API}/patrons", params={"page": 1}, headers=auth(low))

    assert [p["id"] for p in res.json()] == [low.id]


async def test_negative_page_is_rejected(client, make_user, auth):
    alice = make_user("alice")

    res = await client.get(f"{API}/patrons", params={"page": -1}, headers=auth(alice))

    assert res.status_code == 400


async def test_huge_page_is_rejected(client, make_user, auth):
    alice = make_user("alice")

    res = await client.get(f"{API}/patrons", params={"page": 10**20}, headers=auth(alice))

    assert res.status_code == 400
    assert res.json()["error"]["kind"] == "BadRequest"


async def test_heroes_sorted_by_contributor_level(client, make_user, auth):
    two = make_user("two", contributor={"level": 2})
    seven = make_user("seven", contributor={"level": 7})
    make_user("admin-only", contributor={"admin": True})

    res = await client.get(f"{API}/heroes", headers=auth(two))

    assert [h["id"] for h in res.json()] == [seven.id, two.id]


# -- single hero -----------------------------------------------------------------

async def test_get_hero_requires_admin(client, make_user, auth):
    alice = make_user("alice")

    res = await client.get(f"{API}/heroes/{alice.id}", headers=auth(alice))

    assert res.status_code == 401
    assert res.json()["error"]["kind"] == "NotAuthorized"


async def test_get_hero_fills_missing_contributor(client, make_user, auth, admin):
    alice = make_user("alice", balance=3.0)

    res = await client.get(f"{API}/heroes/{alice.id}", headers=auth(admin))

    assert res.status_code == 200
    body = res.json()
    assert body["contributor"] == {}
    assert body["balance"] == 3.0
    assert body["auth"] == {"blocked": False}


async def test_get_unknown_hero_is_not_found(client, auth, admin):
    res = await client.get(f"{API}/heroes/ghost", headers=auth(admin))
    assert res.status_code == 404


async def test_update_hero_requires_admin(client, make_user, auth):
    alice = make_user("alice")

    res = await client.put(f"{API}/heroes/{alice.id}", json={"balance": 100}, headers=auth(alice))

    assert res.status_code == 401


async def test_raising_level_grants_gems(client, make_user, auth, admin, load_user):
    hero = make_user("hero", contributor={"level": 3, "text": "Blacksmith"})

    res = await client.put(f"{API}/heroes/{hero.id}", json={"contributor": {"level": 5}}, headers=auth(admin))

    assert res.status_code == 200
    body = res.json()
    assert body["balance"] == 2.0
    assert body["contributor"] == {"level": 5, "text": "Blacksmith"}
    assert load_user(hero.id).flags["contributor"] is True


async def test_lowering_level_grants_nothing(client, make_user, auth, admin):
    hero = make_user("hero", contributor={"level": 5})

    res = await client.put(f"{API}/heroes/{hero.id}", json={"contributor": {"level": 2}}, headers=auth(admin))

    assert res.json()["balance"] == 0
    assert res.json()["contributor"]["level"] == 2


async def test_non_integer_level_is_rejected(client, make_user, auth, admin, load_user):
    hero = make_user("hero", contributor={"level": 3})

    for level in ("7", 6.0, 6.5, True, -1):
        res = await client.put(
            f"{API}/heroes/{hero.id}", json={"contributor": {"level": level}}, headers=auth(admin)
        )
        assert res.status_code == 400
        assert res.json()["error"]["kind"] == "BadRequest"

    stored = load_user(hero.id)
    assert stored.contributor == {"level": 3}
    assert stored.balance == 0


async def test_grant_is_added_to_overwritten_balance(client, make_user, auth, admin):
    hero = make_user("hero", balance=50.0)

    res = await client.put(
        f"{API}/heroes/{hero.id}",
        json={"balance": 10, "contributor": {"level": 1}},
        headers=auth(admin),
    )

    assert res.json()["balance"] == 10.75


async def test_tier_six_grants_contributor_pet(client, make_user, auth, admin):
    hero = make_user("hero", contributor={"level": 5})

    res = await client.put(f"{API}/heroes/{hero.id}", json={"contributor": {"level": 6}}, headers=auth(admin))

    assert res.json()["items"]["pets"][CONTRIBUTOR_PET] == 5


async def test_whitelisted_item_path_is_written(client, make_user, auth, admin):
    hero = make_user("hero")

    res = await client.put(
        f"{API}/heroes/{hero.id}",
        json={"itemPath": "items.pets.Wolf-Base", "itemVal": 5},
        headers=auth(admin),
    )

    assert res.json()["items"] == {"pets": {"Wolf-Base": 5}}


async def test_unknown_item_path_is_ignored(client, make_user, auth, admin):
    hero = make_user("hero")

    res = await client.put(
        f"{API}/heroes/{hero.id}",
        json={"itemPath": "items.pets.Unicorn-Rainbow", "itemVal": 5},
        headers=auth(admin),
    )

    assert res.status_code == 200
    assert res.json()["items"] == {}


async def test_ads_purchase_flag(client, make_user, auth, admin):
    hero = make_user("hero")

    res = await client.put(f"{API}/heroes/{hero.id}", json={"purchased": {"ads": True}}, headers=auth(admin))

    assert res.json()["purchased"] == {"ads": True}


async def test_blocking_a_hero_locks_them_out(client, make_user, auth, admin):
    hero = make_user("hero")

    res = await client.put(f"{API}/heroes/{hero.id}", json={"auth": {"blocked": True}}, headers=auth(admin))
    assert res.json()["auth"] == {"blocked": True}

    res = await client.get("/api/v1/users/me", headers=auth(hero))
    assert res.status_code == 401


async def test_non_boolean_blocked_flag_is_ignored(client, make_user, auth, admin):
    hero = make_user("hero")

    res = await client.put(f"{API}/heroes/{hero.id}", json={"auth": {"blocked": "yes"}}, headers=auth(admin))

    assert res.json()["auth"] == {"blocked": False}


async def test_hero_update_is_audited(client, make_user, auth, admin):
    hero = make_user("hero")
    await client.put(f"{API}/heroes/{hero.id}", json={"balance": 4}, headers=auth(admin))

    res = await client.get("/api/v1/audit/", params={"object_type": "hero"}, headers=auth(admin))

    assert res.status_code == 200
    entry = res.json()[0]
    assert entry["action"] == "update"
    assert entry["object_id"] == hero.id
    assert entry["user_id"] == admin.id
    assert entry["details"] == {"balance": 4.0}


async def test_audit_log_requires_admin(client, make_user, auth):
    alice = make_user("alice")

    res = await client.get("/api/v1/audit/", headers=auth(alice))

    assert res.status_code == 401
