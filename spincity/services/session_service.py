"""
Session bootstrap: who is signed in, and which data they get to see.

States: Initializing -> Unauthenticated | Authenticated. Branding loads
first so the splash/login screen never waits on entity data. With the
local backend the signed-in user is a persisted pointer (the user id);
with the remote backend the external identity source decides, and users
are matched by e-mail address. Inventory statuses are reconciled once per
bootstrap, so later manual status edits stand. A failed reload drops back
to Unauthenticated and is announced, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from spincity.core.identity import Identity, IdentitySource, Unsubscribe
from spincity.core.notifier import Announce
from spincity.core.utils import same_id
from spincity.domain.entities import SESSION_COLLECTIONS, USERS, is_admin, public_user
from spincity.repositories.factory import Stores
from spincity.services.auth_service import AuthService
from spincity.services.settings_service import SettingsStore

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "current_user"

Reconcile = Callable[[], Awaitable[Any]]


class SessionState(str, Enum):
    INITIALIZING = "Initializing"
    UNAUTHENTICATED = "Unauthenticated"
    AUTHENTICATED = "Authenticated"


class SessionNotReady(Exception):
    def __init__(self, state: SessionState):
        super().__init__(f"Session is {state.value}; sign in and wait for the data to load.")
        self.state = state
        self.message = str(self)


@dataclass
class SessionContext:
    """Everything the signed-in user currently has loaded."""

    state: SessionState = SessionState.INITIALIZING
    user: Optional[dict] = None
    data: Dict[str, List[dict]] = field(default_factory=dict)
    sms_settings: Optional[dict] = None
    app_logo: Optional[str] = None
    splash_logo: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED and self.user is not None

    def sign_out(self) -> None:
        self.state = SessionState.UNAUTHENTICATED
        self.user = None
        self.data = {}
        self.sms_settings = None

    def describe(self) -> dict:
        return {
            "state": self.state.value,
            "user": public_user(self.user),
            "appLogo": self.app_logo,
            "splashLogo": self.splash_logo,
        }


class SessionBootstrapper:
    def __init__(
        self,
        stores: Stores,
        settings_store: SettingsStore,
        auth: AuthService,
        *,
        identity_source: Optional[IdentitySource] = None,
        announce: Optional[Announce] = None,
        reconcile: Optional[Reconcile] = None,
        context: Optional[SessionContext] = None,
    ) -> None:
        self._stores = stores
        self._settings = settings_store
        self._auth = auth
        self._identity_source = identity_source
        self._announce = announce or (lambda message: None)
        self._reconcile = reconcile
        self._unsubscribe: Optional[Unsubscribe] = None
        self.context = context or SessionContext()

    @property
    def uses_remote_identity(self) -> bool:
        return self._stores.remote and self._identity_source is not None

    async def bootstrap(self) -> SessionState:
        self.context.state = SessionState.INITIALIZING
        await self._load_branding()
        await self._auth.ensure_default_admin()
        await self._reconcile_inventory()

        if self.uses_remote_identity:
            if self._unsubscribe is None:
                self._unsubscribe = self._identity_source.subscribe(self.on_identity_changed)
            self.context.state = SessionState.UNAUTHENTICATED
            current = self._identity_source.current
            if current is not None:
                await self.on_identity_changed(current)
            return self.context.state

        user = await self._resolve_pointer()
        if user is None:
            self.context.sign_out()
            return self.context.state
        return await self._activate(user)

    async def login(self, user: dict) -> SessionState:
        if not self.uses_remote_identity:
            await self._stores.kv.set(CURRENT_USER_KEY, user.get("id"))
        return await self._activate(user)

    async def logout(self) -> SessionState:
        if not self.uses_remote_identity:
            await self._stores.kv.remove(CURRENT_USER_KEY)
        self.context.sign_out()
        return self.context.state

    async def reload(self) -> SessionState:
        """Reload the signed-in user's data, re-reading the user record first.

        A user that no longer exists (for example after a restore) is signed out.
        """
        if self.context.user is None:
            self.context.sign_out()
            return self.context.state
        user = await self._lookup_signed_in(self.context.user)
        if user is None:
            logger.warning("Signed-in user %s no longer exists; signing out", self.context.user.get("email"))
            if not self.uses_remote_identity:
                await self._stores.kv.remove(CURRENT_USER_KEY)
            self.context.sign_out()
            self._announce("Your user profile no longer exists. Please sign in again.")
            return self.context.state
        return await self._activate(user)

    async def on_identity_changed(self, identity: Optional[Identity]) -> None:
        if identity is None:
            self.context.sign_out()
            return
        user = await self._auth.find_by_email(identity.email)
        if user is None:
            logger.warning("No user record matches signed-in identity %s", identity.email)
            self.context.sign_out()
            self._announce(f"No user profile found for {identity.email}.")
            return
        await self._activate(user)

    def refresh_user(self, user: dict) -> None:
        if self.context.user is not None and same_id(self.context.user.get("id"), user.get("id")):
            self.context.user = dict(user)

    def require_authenticated(self) -> dict:
        if not self.context.authenticated:
            raise SessionNotReady(self.context.state)
        return self.context.user

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def _load_branding(self) -> None:
        self.context.splash_logo = await self._settings.get_splash_logo()
        self.context.app_logo = await self._settings.get_app_logo()

    async def _resolve_pointer(self) -> Optional[dict]:
        pointer = await self._stores.kv.get(CURRENT_USER_KEY, None)
        if isinstance(pointer, dict):
            # older versions stored the whole user record
            pointer = pointer.get("id")
        if pointer in (None, ""):
            return None
        user = await self._stores.collection(USERS).get(pointer)
        if user is None:
            logger.warning("Stored current user %s no longer exists; signing out", pointer)
            await self._stores.kv.remove(CURRENT_USER_KEY)
        return user

    async def _lookup_signed_in(self, user: dict) -> Optional[dict]:
        if self.uses_remote_identity:
            return await self._auth.find_by_email(user.get("email"))
        return await self._stores.collection(USERS).get(user.get("id"))

    async def _reconcile_inventory(self) -> None:
        if self._reconcile is None:
            return
        try:
            await self._reconcile()
        except Exception as exc:
            logger.exception("Inventory reconciliation failed")
            self._announce(f"Inventory check failed: {exc}")

    async def _activate(self, user: dict) -> SessionState:
        try:
            data: Dict[str, List[dict]] = {}
            for name in SESSION_COLLECTIONS:
                data[name] = await self._stores.collection(name).list()
            if is_admin(user):
                data[USERS] = [public_user(u) for u in await self._stores.collection(USERS).list()]
            sms_settings = await self._settings.get_sms_settings()
            app_logo = await self._settings.get_app_logo()
        except Exception as exc:
            logger.exception("Failed to load data for %s", user.get("email"))
            self.context.sign_out()
            self._announce(f"Failed to load data: {exc}")
            return self.context.state

        self.context.user = dict(user)
        self.context.data = data
        self.context.sms_settings = sms_settings
        self.context.app_logo = app_logo
        self.context.state = SessionState.AUTHENTICATED
        return self.context.state
