"""Per-user profile documents stored as JSONB in Postgres.

One row per ``(app_namespace, user_id)`` holds the whole profile document in
its camelCase JSON shape.  Writes are either a full-document replace
(onboarding) or a single top-level field replace (the symptom log array).
There is no version column: concurrent writers race and the last write
observed by Postgres wins.

Every write also issues ``pg_notify('profile_changes', '<namespace>:<user>')``
in the same transaction.  ``ProfileStore.watch()`` subscribers share one
LISTEN connection opened outside the pool (``ChangeListener``) and re-read
the document through a short-lived pooled connection on every notification.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Awaitable, Callable

import asyncpg
from pydantic import ValidationError

from src.models.profile import UserProfile

logger = logging.getLogger("cyclecare.profile_store")

CHANGE_CHANNEL = "profile_changes"

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS profile_documents (
    app_namespace TEXT NOT NULL,
    user_id       TEXT NOT NULL,
    document      JSONB NOT NULL,
    updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    PRIMARY KEY (app_namespace, user_id)
)
"""

# Top-level document keys that may be replaced on their own
_REPLACEABLE_FIELDS = frozenset({"symptomsLog"})

_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class ProfileStoreError(Exception):
    """A read or write against the profile store was rejected or failed."""


class ProfileNotFoundError(ProfileStoreError):
    """A field update targeted a profile document that does not exist."""


ListenerFactory = Callable[[], Awaitable[asyncpg.Connection]]


class ChangeListener:
    """One LISTEN connection on ``CHANGE_CHANNEL`` shared by all watchers.

    The connection comes from ``connect``, not from the pool.  It is opened
    by the first subscriber and closed when the last one leaves.  A
    notification sets every event subscribed under its payload key.
    """

    def __init__(self, connect: ListenerFactory) -> None:
        self._connect = connect
        self._conn: asyncpg.Connection | None = None
        self._lock = asyncio.Lock()
        self._subscribers: dict[str, set[asyncio.Event]] = {}

    @property
    def connected(self) -> bool:
        return self._conn is not None

    async def subscribe(self, key: str) -> asyncio.Event:
        async with self._lock:
            if self._conn is None:
                conn = await self._connect()
                try:
                    await conn.add_listener(CHANGE_CHANNEL, self._on_notify)
                except _DB_ERRORS:
                    await conn.close()
                    raise
                conn.add_termination_listener(self._on_terminate)
                self._conn = conn
            event = asyncio.Event()
            self._subscribers.setdefault(key, set()).add(event)
            return event

    async def unsubscribe(self, key: str, event: asyncio.Event) -> None:
        async with self._lock:
            events = self._subscribers.get(key)
            if events is not None:
                events.discard(event)
                if not events:
                    del self._subscribers[key]
            if not self._subscribers:
                await self._disconnect()

    async def close(self) -> None:
        """Drop the connection and wake every subscriber so it can stop."""
        async with self._lock:
            self._wake_all()
            await self._disconnect()

    def _on_notify(
        self, connection: asyncpg.Connection, pid: int, channel: str, payload: str
    ) -> None:
        for event in self._subscribers.get(payload, ()):
            event.set()

    def _on_terminate(self, connection: asyncpg.Connection) -> None:
        if connection is self._conn:
            logger.warning("Profile change listener connection lost")
            self._conn = None
            self._wake_all()

    def _wake_all(self) -> None:
        for events in self._subscribers.values():
            for event in events:
                event.set()

    async def _disconnect(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None or conn.is_closed():
            return
        try:
            await conn.remove_listener(CHANGE_CHANNEL, self._on_notify)
            await conn.close()
        except _DB_ERRORS as exc:
            logger.warning("Closing the change listener failed: %s", exc)
            conn.terminate()


class ProfileStore:
    """Read, replace and watch profile documents.

    Usage::

        store = ProfileStore(pool, "my-app", connect_listener=open_connection)
        profile = await store.get(user_id)
        await store.replace_field(user_id, "symptomsLog", [...])

        async for profile in store.watch(user_id):
            ...  # first the current profile, then once per change

    ``namespace`` is used verbatim as the row key; ``Settings.document_namespace``
    produces a slash-free value for it.
    """

    def __init__(
        self, pool: asyncpg.Pool, namespace: str, connect_listener: ListenerFactory
    ) -> None:
        self._pool = pool
        self._namespace = namespace
        self._listener = ChangeListener(connect_listener)

    @property
    def namespace(self) -> str:
        return self._namespace

    def _channel_key(self, user_id: str) -> str:
        return f"{self._namespace}:{user_id}"

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    async def ensure_schema(self) -> None:
        """Create the documents table if it does not exist yet."""
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(_SCHEMA_SQL)
        except _DB_ERRORS as exc:
            raise ProfileStoreError(f"Could not create profile schema: {exc}") from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, user_id: str) -> UserProfile:
        """Return the user's profile.

        A user with no stored document gets ``UserProfile(onboarded=False)``.

        Raises:
            ProfileStoreError: If the read fails or the stored document is malformed.
        """
        try:
            async with self._pool.acquire() as conn:
                document = await conn.fetchval(
                    "SELECT document FROM profile_documents "
                    "WHERE app_namespace = $1 AND user_id = $2",
                    self._namespace, user_id,
                )
        except _DB_ERRORS as exc:
            logger.error("Profile read failed for user %s: %s", user_id, exc)
            raise ProfileStoreError(f"Could not fetch user data: {exc}") from exc

        if document is None:
            return UserProfile(onboarded=False)
        try:
            return UserProfile.model_validate(document)
        except ValidationError as exc:
            logger.error("Stored profile for user %s is malformed: %s", user_id, exc)
            raise ProfileStoreError("Stored profile document is malformed") from exc

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def replace(self, user_id: str, profile: UserProfile) -> None:
        """Write the whole profile document, creating it if needed.

        Raises:
            ProfileStoreError: If the write is rejected.
        """
        document = profile.to_document()
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute(
                        """
                        INSERT INTO profile_documents (app_namespace, user_id, document)
                        VALUES ($1, $2, $3::jsonb)
                        ON CONFLICT (app_namespace, user_id) DO UPDATE SET
                            document = EXCLUDED.document,
                            updated_at = NOW()
                        """,
                        self._namespace, user_id, document,
                    )
                    await conn.execute(
                        "SELECT pg_notify($1, $2)", CHANGE_CHANNEL, self._channel_key(user_id)
                    )
        except _DB_ERRORS as exc:
            logger.error("Profile replace failed for user %s: %s", user_id, exc)
            raise ProfileStoreError(f"Could not save profile: {exc}") from exc

        logger.info("Profile document replaced for user %s", user_id)

    async def replace_field(self, user_id: str, field: str, value: Any) -> None:
        """Replace one top-level field of an existing profile document.

        Args:
            user_id: Owner of the document.
            field:   camelCase document key (currently only ``symptomsLog``).
            value:   JSON-serializable replacement value.

        Raises:
            ValueError:           If ``field`` may not be replaced on its own.
            ProfileNotFoundError: If the user has no profile document.
            ProfileStoreError:    If the write is rejected.
        """
        if field not in _REPLACEABLE_FIELDS:
            raise ValueError(f"Field {field!r} cannot be replaced on its own")

        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    status = await conn.execute(
                        """
                        UPDATE profile_documents
                        SET document = jsonb_set(document, ARRAY[$3::text], $4::jsonb, true),
                            updated_at = NOW()
                        WHERE app_namespace = $1 AND user_id = $2
                        """,
                        self._namespace, user_id, field, value,
                    )
                    if status == "UPDATE 0":
                        raise ProfileNotFoundError(f"No profile document for user {user_id}")
                    await conn.execute(
                        "SELECT pg_notify($1, $2)", CHANGE_CHANNEL, self._channel_key(user_id)
                    )
        except ProfileStoreError:
            raise
        except _DB_ERRORS as exc:
            logger.error("Profile field %s update failed for user %s: %s", field, user_id, exc)
            raise ProfileStoreError(f"Could not save {field}: {exc}") from exc

        logger.info("Profile field %s replaced for user %s", field, user_id)

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    async def watch(self, user_id: str) -> AsyncIterator[UserProfile]:
        """Yield the current profile, then a fresh copy after every write.

        An open subscription holds no pool connection: it waits on the shared
        listener and borrows a pooled connection only while re-reading.
        Notifications that arrive while a copy is being fetched collapse into
        the next fetch.

        Raises:
            ProfileStoreError: If subscribing or a re-read fails, or the
                listener connection is lost.
        """
        key = self._channel_key(user_id)
        try:
            changed = await self._listener.subscribe(key)
        except _DB_ERRORS as exc:
            raise ProfileStoreError(f"Could not subscribe to profile changes: {exc}") from exc

        logger.debug("Watching profile changes for user %s", user_id)
        try:
            yield await self.get(user_id)
            while True:
                await changed.wait()
                changed.clear()
                if not self._listener.connected:
                    raise ProfileStoreError("Profile change listener connection was lost")
                yield await self.get(user_id)
        finally:
            await self._listener.unsubscribe(key, changed)

    async def close(self) -> None:
        """Stop all subscriptions.  Call at app shutdown, before closing the pool."""
        await self._listener.close()
