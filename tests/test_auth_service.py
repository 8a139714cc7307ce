"""Unit tests for the session authentication manager.

Covers credential validation, token issuance, refresh rotation, logout,
expiry handling and the profile operations, against a real SQLite schema.
"""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.core.exceptions import InvalidOrExpiredRefreshToken, StaleUserOnPasswordChange
from app.core.security_password import (
    hash_password,
    hash_refresh_token,
    pwd_context,
    refresh_lookup_hint,
    verify_password,
)
from app.core.tokens import decode_access, new_refresh_token
from app.crud.refresh_token import refresh_token_crud
from app.models import RefreshToken, User
from app.services import auth as auth_service

from tests.conftest import USER_EMAIL, USER_PASSWORD


def _login(db, email=USER_EMAIL, password=USER_PASSWORD):
    user = auth_service.validate_credential(db, email, password)
    assert user is not None
    return auth_service.login(db, user)


def _rows(db, user_id):
    return db.scalars(select(RefreshToken).where(RefreshToken.user_id == user_id)).all()


class TestValidateCredential:
    def test_match_returns_user_without_password_hash(self, db, user):
        result = auth_service.validate_credential(db, USER_EMAIL, USER_PASSWORD)
        assert result["id"] == user.id
        assert result["email"] == USER_EMAIL
        assert result["tenant_id"] == user.tenant_id
        assert "password_hash" not in result

    def test_email_is_normalized(self, db, user):
        assert auth_service.validate_credential(db, "  A@B.com ", USER_PASSWORD) is not None

    def test_unknown_email_is_no_match(self, db, user):
        assert auth_service.validate_credential(db, "nobody@b.com", USER_PASSWORD) is None

    def test_wrong_password_is_no_match(self, db, user):
        assert auth_service.validate_credential(db, USER_EMAIL, "wrongpassword") is None

    def test_legacy_hash_upgraded_on_success(self, db, user):
        user.password_hash = pwd_context.handler("bcrypt").hash(USER_PASSWORD)
        db.commit()

        assert auth_service.validate_credential(db, USER_EMAIL, USER_PASSWORD) is not None
        db.refresh(user)
        assert user.password_hash.startswith("$argon2")
        assert verify_password(USER_PASSWORD, user.password_hash)


class TestLogin:
    def test_round_trip(self, db, user):
        pair = _login(db)
        payload = decode_access(pair["access_token"])
        assert payload["sub"] == user.id
        assert payload["email"] == USER_EMAIL
        assert payload["tenantId"] == user.tenant_id
        assert len(pair["refresh_token"]) == 64
        int(pair["refresh_token"], 16)

    def test_one_row_with_seven_day_expiry(self, db, user):
        before = datetime.now(timezone.utc)
        _login(db)
        rows = _rows(db, user.id)
        assert len(rows) == 1
        expires = rows[0].expires_at.replace(tzinfo=timezone.utc)
        assert timedelta(days=7) - timedelta(minutes=1) < expires - before <= timedelta(days=7, minutes=1)

    def test_raw_token_never_persisted(self, db, user):
        pair = _login(db)
        row = _rows(db, user.id)[0]
        assert row.token_hash != pair["refresh_token"]
        assert pair["refresh_token"] not in row.token_hash
        assert pair["refresh_token"] not in (row.lookup_hint or "")

    def test_multiple_devices_keep_separate_sessions(self, db, user):
        _login(db)
        _login(db)
        assert refresh_token_crud.count_for_user(db, user.id) == 2

    def test_single_session_mode_replaces_previous(self, db, user, monkeypatch):
        monkeypatch.setattr(settings, "SINGLE_SESSION_PER_USER", True)
        first = _login(db)
        _login(db)
        assert refresh_token_crud.count_for_user(db, user.id) == 1
        with pytest.raises(InvalidOrExpiredRefreshToken):
            auth_service.refresh_token(db, first["refresh_token"])


class TestRefreshToken:
    def test_rotation_returns_new_pair(self, db, user):
        t1 = _login(db)
        t2 = auth_service.refresh_token(db, t1["refresh_token"])
        assert t2["refresh_token"] != t1["refresh_token"]
        assert decode_access(t2["access_token"])["sub"] == user.id
        assert refresh_token_crud.count_for_user(db, user.id) == 1

    def test_rotation_deletes_all_sessions_of_user(self, db, user, admin):
        t1 = _login(db)
        _login(db)
        other = _login(db, "admin@demo.com", "admin123")
        assert refresh_token_crud.count_for_user(db, user.id) == 2

        auth_service.refresh_token(db, t1["refresh_token"])
        assert refresh_token_crud.count_for_user(db, user.id) == 1
        # other users are untouched
        assert refresh_token_crud.count_for_user(db, admin.id) == 1
        auth_service.refresh_token(db, other["refresh_token"])

    def test_reused_token_rejected(self, db, user):
        t1 = _login(db)
        auth_service.refresh_token(db, t1["refresh_token"])
        with pytest.raises(InvalidOrExpiredRefreshToken):
            auth_service.refresh_token(db, t1["refresh_token"])

    def test_unknown_token_rejected(self, db, user):
        _login(db)
        with pytest.raises(InvalidOrExpiredRefreshToken):
            auth_service.refresh_token(db, new_refresh_token())

    def test_expired_record_never_matches(self, db, user):
        raw = new_refresh_token()
        db.add(RefreshToken(
            user_id=user.id,
            token_hash=hash_refresh_token(raw),
            lookup_hint=refresh_lookup_hint(raw),
            expires_at=datetime.now(timezone.utc) - timedelta(seconds=1),
        ))
        db.commit()
        with pytest.raises(InvalidOrExpiredRefreshToken):
            auth_service.refresh_token(db, raw)

    def test_expiry_rechecked_after_match(self, db, user, monkeypatch):
        raw = new_refresh_token()
        stale = RefreshToken(
            id="rt-1",
            user_id=user.id,
            token_hash=hash_refresh_token(raw),
            expires_at=datetime.now(timezone.utc) - timedelta(seconds=1),
        )
        monkeypatch.setattr(refresh_token_crud, "active_candidates", lambda *a, **kw: [stale])
        with pytest.raises(InvalidOrExpiredRefreshToken):
            auth_service.refresh_token(db, raw)

    def test_row_without_lookup_hint_still_matches(self, db, user):
        raw = new_refresh_token()
        db.add(RefreshToken(
            user_id=user.id,
            token_hash=hash_refresh_token(raw),
            lookup_hint=None,
            expires_at=datetime.now(timezone.utc) + timedelta(days=1),
        ))
        db.commit()
        pair = auth_service.refresh_token(db, raw)
        assert len(pair["refresh_token"]) == 64

    def test_concurrent_consumer_loses(self, db, user, monkeypatch):
        t1 = _login(db)
        real_delete = refresh_token_crud.delete_one

        def racing_delete(session, token_id):
            # another request consumed the same row first
            session.execute(delete(RefreshToken).where(RefreshToken.id == token_id))
            return real_delete(session, token_id)

        monkeypatch.setattr(refresh_token_crud, "delete_one", racing_delete)
        with pytest.raises(InvalidOrExpiredRefreshToken):
            auth_service.refresh_token(db, t1["refresh_token"])
        # no new pair was issued for the losing caller
        assert refresh_token_crud.count_for_user(db, user.id) == 1


class TestLogout:
    def test_logout_is_idempotent(self, db, user):
        _login(db)
        _login(db)
        auth_service.logout(db, user.id)
        auth_service.logout(db, user.id)
        assert refresh_token_crud.count_for_user(db, user.id) == 0

    def test_logout_unknown_user_is_noop(self, db):
        auth_service.logout(db, "does-not-exist")


class TestPurgeExpired:
    def test_only_expired_rows_removed(self, db, user):
        _login(db)
        raw = new_refresh_token()
        db.add(RefreshToken(
            user_id=user.id,
            token_hash=hash_refresh_token(raw),
            lookup_hint=refresh_lookup_hint(raw),
            expires_at=datetime.now(timezone.utc) - timedelta(days=1),
        ))
        db.commit()

        assert auth_service.purge_expired(db) == 1
        assert refresh_token_crud.count_for_user(db, user.id) == 1


class TestProfile:
    def test_profile_is_flat_with_memberships(self, db, user, brand):
        profile = auth_service.get_profile(db, user.id)
        assert profile["id"] == user.id
        assert profile["email"] == USER_EMAIL
        assert "password_hash" not in profile
        assert profile["memberships"] == [
            {"client_id": brand.id, "client_name": "Demo Brand", "role": "staff"}
        ]

    def test_missing_user_profile_is_none(self, db):
        assert auth_service.get_profile(db, "gone") is None

    def test_update_name_only(self, db, user):
        profile = auth_service.update_me(db, user.id, name="Renamed")
        assert profile["name"] == "Renamed"

    def test_change_password(self, db, user):
        auth_service.update_me(db, user.id, current_password=USER_PASSWORD, new_password="newsecret99")
        assert auth_service.validate_credential(db, USER_EMAIL, "newsecret99") is not None
        assert auth_service.validate_credential(db, USER_EMAIL, USER_PASSWORD) is None

    def test_change_password_wrong_current(self, db, user):
        with pytest.raises(StaleUserOnPasswordChange):
            auth_service.update_me(db, user.id, current_password="wrongpass", new_password="newsecret99")

    def test_change_password_without_current(self, db, user):
        with pytest.raises(StaleUserOnPasswordChange):
            auth_service.update_me(db, user.id, new_password="newsecret99")

    def test_change_password_vanished_user(self, db):
        with pytest.raises(StaleUserOnPasswordChange):
            auth_service.update_me(db, "gone", current_password="whatever1", new_password="newsecret99")


def test_email_unique_across_tenants(db, user):
    from app.models import Tenant

    other = Tenant(name="Other Tenant")
    db.add(other); db.commit()
    db.add(User(tenant_id=other.id, email=USER_EMAIL, password_hash=hash_password("x" * 8), name="Dup"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_scenario_login_refresh_reuse_logout(db, user):
    t1 = _login(db)
    t2 = auth_service.refresh_token(db, t1["refresh_token"])
    assert len(_rows(db, user.id)) == 1

    with pytest.raises(InvalidOrExpiredRefreshToken):
        auth_service.refresh_token(db, t1["refresh_token"])

    auth_service.logout(db, user.id)
    with pytest.raises(InvalidOrExpiredRefreshToken):
        auth_service.refresh_token(db, t2["refresh_token"])
