"""Signed-in user lookup, access checks and logout."""

from typing import Optional

from common.constants import AUTH_ME_KIND
from common.logging_config import get_logger
from client.api import SoundboardApi
from client.exceptions import ForbiddenError, NotAuthenticatedError
from client.query_cache import QueryCache, QueryKey
from client.schemas import User

logger = get_logger(__name__)

AUTH_ME_KEY = QueryKey(AUTH_ME_KIND)


class Session:
    """Cookie session shared by every request of the client."""

    def __init__(self, api: SoundboardApi, cache: QueryCache):
        self.api = api
        self.cache = cache

    def steam_login_url(self) -> str:
        return self.api.steam_login_url()

    def login(self, session_cookie: str) -> None:
        """
        Adopt a session cookie obtained from the Steam sign-in flow.

        Args:
            session_cookie: Cookie value issued by the server
        """
        self.api.transport.set_session_cookie(session_cookie)
        self.cache.clear()
        logger.info("Session cookie stored")

    async def current_user(self) -> Optional[User]:
        return await self.cache.fetch(AUTH_ME_KEY, self.api.get_me)

    async def require_user(self) -> User:
        user = await self.current_user()
        if user is None:
            raise NotAuthenticatedError("Not signed in. Run: login <session-cookie>")
        return user

    async def require_admin(self) -> User:
        user = await self.require_user()
        if not user.is_admin:
            raise ForbiddenError("Administrator rights required")
        return user

    async def logout(self) -> None:
        """End the session on the server and forget it locally."""
        await self.api.logout()
        self.api.transport.set_session_cookie(None)
        self.cache.set_data(AUTH_ME_KEY, None)
        self.cache.invalidate(AUTH_ME_KIND)
        logger.info("Logged out")
