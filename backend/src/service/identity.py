# src/service/identity.py
import logging
from datetime import datetime
from typing import Callable, Mapping, Optional, Protocol

from infrastructure.queue.codec import decode_identity
from infrastructure.queue.models import IdentitySource, ResolvedIdentity, VisitorEntry, new_visitor_id, utcnow

logger = logging.getLogger(__name__)


class HasCookies(Protocol):
    cookies: Mapping[str, str]


class IdentityResolver:
    """
    Resolve-or-mint: the visitor identity carried by the cookie, or a new one.
    Malformed cookies count as absent; resolve() never raises.
    """

    def __init__(
        self,
        cookie_name: str = "__uid",
        *,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_visitor_id,
    ) -> None:
        self.cookie_name = cookie_name
        self._clock = clock
        self._id_factory = id_factory

    def mint(self) -> VisitorEntry:
        return VisitorEntry(id=self._id_factory(), enqueued_at=self._clock())

    def resolve_cookie(self, raw: Optional[str]) -> ResolvedIdentity:
        entry = decode_identity(raw)
        if entry is not None:
            return ResolvedIdentity(entry=entry, source=IdentitySource.existing)
        if raw:
            logger.debug("Ignoring malformed %s cookie", self.cookie_name)
        return ResolvedIdentity(entry=self.mint(), source=IdentitySource.minted)

    def resolve(self, request: HasCookies) -> ResolvedIdentity:
        return self.resolve_cookie(request.cookies.get(self.cookie_name))
