"""
Identity store: async repositories for the `users` and `agents` collections.

Both variants share one implementation; each subclass binds its collection
name and document model. Lookups by an id that is not a valid ObjectId are
treated as "not found" rather than raised. PyMongoError propagates to the
boundary, where it is logged and surfaced as an opaque StorageError.
"""

from __future__ import annotations

import re
from typing import Any, Generic, Optional, TypeVar

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from errors import DuplicateEmailError, ForbiddenError
from schemas.models.account import (
    AGENTS_COLLECTION,
    USERS_COLLECTION,
    AccountDoc,
    AccountKind,
    AgentDoc,
    UserDoc,
)
from schemas.models.base import parse_object_id
from shared.datetime_utils import utcnow
from shared.logging import get_logger
from shared.validators import normalize_email

log = get_logger(__name__)

DocT = TypeVar("DocT", bound=AccountDoc)


class AccountRepository(Generic[DocT]):
    """CRUD over one account collection, keyed by ObjectId and by email."""

    collection_name: str
    model: type[DocT]
    kind: AccountKind

    def __init__(self, db: Any, reserved_email: Optional[str] = None) -> None:
        self._col = db[self.collection_name]
        self._reserved_email = normalize_email(reserved_email) if reserved_email else None

    async def get_by_id(self, account_id: Any) -> Optional[DocT]:
        oid = parse_object_id(account_id)
        if oid is None:
            return None
        return self.model.from_mongo(await self._col.find_one({"_id": oid}))

    async def get_by_email(self, email: str) -> Optional[DocT]:
        return self.model.from_mongo(
            await self._col.find_one({"email": normalize_email(email)})
        )

    async def list_all(self, search: Optional[str] = None) -> list[DocT]:
        """Return every account, newest first, optionally filtered by *search*.

        *search* matches name, email or phone number, case-insensitively.
        """
        query: dict = {}
        if search and search.strip():
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            query = {
                "$or": [
                    {"name": pattern},
                    {"email": pattern},
                    {"phone_number": pattern},
                ]
            }
        cursor = self._col.find(query).sort("created_at", -1)
        docs = await cursor.to_list(length=None)
        return [self.model.from_mongo(d) for d in docs]

    async def create(self, doc: DocT) -> DocT:
        """Insert *doc*; fails with DuplicateEmailError without writing anything."""
        doc.email = normalize_email(doc.email)
        if await self._col.find_one({"email": doc.email}, {"_id": 1}):
            raise DuplicateEmailError()

        now = utcnow()
        doc.created_at = now
        doc.updated_at = now
        doc.id = None
        try:
            result = await self._col.insert_one(doc.to_mongo())
        except DuplicateKeyError as e:
            # Lost a race with a concurrent sign-up for the same email
            log.warning(
                "account_duplicate_email_race",
                kind=self.kind.value,
                email=doc.email,
            )
            raise DuplicateEmailError() from e
        doc.id = result.inserted_id
        log.info(
            "account_created",
            kind=self.kind.value,
            account_id=str(result.inserted_id),
        )
        return doc

    async def update_by_id(self, account_id: Any, updates: dict) -> Optional[DocT]:
        oid = parse_object_id(account_id)
        if oid is None:
            return None
        return await self._update({"_id": oid}, updates)

    async def update_by_email(self, email: str, updates: dict) -> Optional[DocT]:
        return await self._update({"email": normalize_email(email)}, updates)

    async def _update(self, query: dict, updates: dict) -> Optional[DocT]:
        fields = {k: v for k, v in updates.items() if k not in ("_id", "id", "email")}
        fields["updated_at"] = utcnow()
        doc = await self._col.find_one_and_update(
            query,
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return self.model.from_mongo(doc)

    async def delete_by_id(self, account_id: Any) -> bool:
        """Delete one account. The reserved super-admin can never be deleted."""
        oid = parse_object_id(account_id)
        if oid is None:
            return False
        if self._reserved_email:
            existing = await self._col.find_one({"_id": oid}, {"email": 1})
            if existing and existing.get("email") == self._reserved_email:
                raise ForbiddenError("Cannot delete super admin user")
        result = await self._col.delete_one({"_id": oid})
        return result.deleted_count > 0


class UserRepository(AccountRepository[UserDoc]):
    collection_name = USERS_COLLECTION
    model = UserDoc
    kind = AccountKind.USER


class AgentRepository(AccountRepository[AgentDoc]):
    collection_name = AGENTS_COLLECTION
    model = AgentDoc
    kind = AccountKind.AGENT
