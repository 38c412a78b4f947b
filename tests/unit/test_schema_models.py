"""Unit tests for MongoDB document models."""

from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId

from schemas.models.account import AccountKind, AgentDoc, UserDoc, UserRole
from schemas.models.base import MongoBaseModel, PyObjectId, parse_object_id
from schemas.models.otp import OTP_TTL_SECONDS, PURPOSE_REGISTRATION, OneTimeCodeDoc


# ── Helpers ───────────────────────────────────────────────────────────────────

def now():
    return datetime.now(timezone.utc)


def oid():
    return ObjectId()


def _user(**overrides) -> UserDoc:
    base = dict(
        name="Alice",
        email="alice@example.com",
        phone_number="555-0100",
        address="1 Main St",
    )
    base.update(overrides)
    return UserDoc(**base)


def _agent(**overrides) -> AgentDoc:
    base = dict(
        name="Bob",
        email="bob@example.com",
        phone_number="555-0101",
        address="2 Side St",
        password_hash="$argon2id$fake",
        photo_url="/uploads/agents/1700000000000-bob.png",
    )
    base.update(overrides)
    return AgentDoc(**base)


# ── PyObjectId ────────────────────────────────────────────────────────────────

class TestPyObjectId:
    def test_accepts_objectid_instance(self):
        o = oid()
        assert PyObjectId._validate(o) == o

    def test_accepts_valid_string(self):
        s = str(oid())
        result = PyObjectId._validate(s)
        assert isinstance(result, ObjectId)
        assert str(result) == s

    def test_rejects_invalid_string(self):
        with pytest.raises(ValueError):
            PyObjectId._validate("not-an-objectid")

    def test_rejects_none(self):
        with pytest.raises((ValueError, TypeError)):
            PyObjectId._validate(None)


@pytest.mark.parametrize("value", ["nope", "", None, 42])
def test_parse_object_id_invalid_returns_none(value):
    assert parse_object_id(value) is None


def test_parse_object_id_valid_string():
    o = oid()
    assert parse_object_id(str(o)) == o


# ── MongoBaseModel ─────────────────────────────────────────────────────────────

class TestMongoBaseModel:
    def test_from_mongo_returns_none_for_none(self):
        assert MongoBaseModel.from_mongo(None) is None

    def test_id_alias(self):
        o = oid()
        m = MongoBaseModel.model_validate({"_id": o})
        assert m.id == o

    def test_to_mongo_drops_none_id(self):
        m = MongoBaseModel()
        d = m.to_mongo()
        assert "_id" not in d

    def test_to_mongo_keeps_objectid_type(self):
        o = oid()
        m = MongoBaseModel.model_validate({"_id": o})
        assert isinstance(m.to_mongo()["_id"], ObjectId)

    def test_json_dump_uses_hex_string(self):
        o = oid()
        m = MongoBaseModel.model_validate({"_id": o})
        assert m.model_dump(mode="json", by_alias=True)["_id"] == str(o)

    def test_id_str_empty_without_id(self):
        assert MongoBaseModel().id_str == ""


# ── UserDoc ───────────────────────────────────────────────────────────────────

class TestUserDoc:
    def test_defaults(self):
        u = _user()
        assert u.kind == "user"
        assert u.role == UserRole.USER
        assert u.verified is False
        assert u.password_hash is None
        assert u.google_id is None

    def test_role_stored_as_plain_string(self):
        d = _user(role=UserRole.SUPERADMIN).to_mongo()
        assert d["role"] == "superadmin"
        assert type(d["role"]) is str

    def test_is_superadmin(self):
        assert _user(role=UserRole.SUPERADMIN).is_superadmin is True
        assert _user().is_superadmin is False

    def test_naive_datetimes_read_back_as_utc(self):
        raw = _user().to_mongo()
        raw["_id"] = oid()
        raw["created_at"] = datetime(2024, 5, 1, 10, 30)
        u = UserDoc.from_mongo(raw)
        assert u.created_at.tzinfo is not None
        assert u.created_at == datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc)

    def test_missing_optional_fields_default(self):
        u = UserDoc.from_mongo({"_id": oid(), "name": "X", "email": "x@e.com"})
        assert u.phone_number == ""
        assert u.address == ""
        assert u.role == "user"


# ── AgentDoc ──────────────────────────────────────────────────────────────────

class TestAgentDoc:
    def test_new_agent_is_unapproved(self):
        a = _agent()
        assert a.kind == AccountKind.AGENT.value
        assert a.approved is False
        assert a.verified is False

    def test_photo_url_required(self):
        with pytest.raises(Exception):
            AgentDoc(name="A", email="a@e.com", password_hash="h")

    def test_to_mongo_round_trip(self):
        a = _agent(approved=True)
        raw = a.to_mongo()
        raw["_id"] = oid()
        back = AgentDoc.from_mongo(raw)
        assert back.approved is True
        assert back.photo_url == a.photo_url


# ── OneTimeCodeDoc ────────────────────────────────────────────────────────────

class TestOneTimeCodeDoc:
    def test_fields(self):
        account_id = oid()
        created = now()
        doc = OneTimeCodeDoc(
            account_id=account_id,
            account_kind=AccountKind.AGENT,
            code_hash="$argon2id$fake",
            created_at=created,
            expires_at=created + timedelta(seconds=OTP_TTL_SECONDS),
        )
        assert doc.purpose == PURPOSE_REGISTRATION
        assert doc.account_kind == "agent"
        assert isinstance(doc.to_mongo()["account_id"], ObjectId)
        assert doc.expires_at - doc.created_at == timedelta(minutes=5)

    def test_account_id_accepts_hex_string(self):
        account_id = oid()
        doc = OneTimeCodeDoc(
            account_id=str(account_id),
            code_hash="h",
            created_at=now(),
            expires_at=now(),
        )
        assert doc.account_id == account_id
