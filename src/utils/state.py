from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import jwt

from api import cache
from api.client import set_token
from api.models import ROLE_ADMIN
from store.cart import Cart
from utils.logger import get_logger

_logger = get_logger(__name__)


class InvalidTokenError(Exception):
    """The token handed to login() could not be decoded."""


@dataclass
class GlobalState:
    """
    Application state shared by screens, passed around through the app.

    Fields:
      - token: bearer token of the logged-in user, None when logged out
      - role: "ADMIN" | "PENGGUNA" | None, from the token's "peran" claim
      - email / name: from the token's "email" / "nama" claims
      - cart: the shopping cart of this session
      - placed_orders: ids of orders created in this session, newest last
    """

    token: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    cart: Cart = field(default_factory=Cart)
    placed_orders: List[str] = field(default_factory=list)

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def login(self, token: str) -> None:
        """Decode the token claims (signature is checked by the backend, not here)."""
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError as e:
            self._reset_session()
            raise InvalidTokenError(str(e)) from e

        self.token = token
        self.role = claims.get("peran")
        self.email = claims.get("email")
        self.name = claims.get("nama")
        set_token(token)
        _logger.debug(f"Session started for {self.email} ({self.role})")

    def logout(self) -> None:
        self._reset_session()
        self.cart.clear()
        self.placed_orders.clear()

    def _reset_session(self) -> None:
        self.token = None
        self.role = None
        self.email = None
        self.name = None
        set_token(None)

    async def start_session(self, token: str) -> None:
        """Log in and remember the token for the next start."""
        self.login(token)
        await cache.save_token(token)

    async def restore_session(self) -> bool:
        """Log in with a remembered token. Returns True if a session was restored."""
        token = await cache.load_token()
        if not token:
            return False
        try:
            self.login(token)
        except InvalidTokenError:
            _logger.warning("Stored token is invalid, logging out.")
            await cache.clear_token()
            return False
        return True

    async def end_session(self) -> None:
        """
        End the current session and forget the stored token.
        This is only called upon logging out
        """
        self.logout()
        await cache.clear_token()
