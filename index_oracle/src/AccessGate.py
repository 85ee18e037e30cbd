"""AccessGate: Decides which identities may submit index updates.

Identities are EVM addresses. They are normalized to their checksum form so
that differently-cased spellings of the same address compare equal.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable

from web3 import Web3

from .errors import UnauthorizedError
from .events import ConfigChanged, EventListener, emit

logger = logging.getLogger(__name__)


def normalize_identity(identity: str) -> str:
    """Return the checksum form of an address.

    :param identity: Hex address, any casing.
    :returns: Checksum address.
    :raises ValueError: If identity is not a valid address.
    """
    return Web3.to_checksum_address(identity)


def require_owner(owner: str, caller: str, action: str) -> None:
    """Check that caller is the owner.

    Malformed caller addresses are treated like any other non-owner.

    :param owner: Checksum address of the owner.
    :param caller: Address attempting the action, any casing.
    :param action: Description used in the error message.
    :raises UnauthorizedError: If caller is not the owner.
    """
    try:
        is_owner = normalize_identity(caller) == owner
    except ValueError:
        is_owner = False
    if not is_owner:
        raise UnauthorizedError(caller, action)


class AccessGate(ABC):
    """Abstract permission check for update submitters."""

    @abstractmethod
    def is_authorized(self, identity: str) -> bool:
        """Check whether an identity may submit updates.

        :param identity: Caller address.
        :returns: True if the caller is permitted.
        """
        pass


class Whitelist(AccessGate):
    """Owner-administered set of permitted submitters.

    :ivar owner: Address allowed to change membership.
    """

    def __init__(
        self,
        owner: str,
        members: Iterable[str] = (),
        listeners: Iterable[EventListener] = (),
    ) -> None:
        """Initialize the whitelist.

        :param owner: Address allowed to add and remove members.
        :param members: Initially whitelisted addresses.
        :param listeners: Receivers of membership change events.
        """
        self.owner = normalize_identity(owner)
        self._members: set[str] = {normalize_identity(m) for m in members}
        self.listeners: list[EventListener] = list(listeners)

    def is_authorized(self, identity: str) -> bool:
        try:
            return normalize_identity(identity) in self._members
        except ValueError:
            return False

    @property
    def members(self) -> frozenset[str]:
        """Return the current members."""
        return frozenset(self._members)

    def add(self, caller: str, identity: str) -> None:
        """Whitelist an address.

        :param caller: Address performing the change; must be the owner.
        :param identity: Address to add.
        :raises UnauthorizedError: If caller is not the owner.
        """
        self._set_member(caller, identity, True)

    def remove(self, caller: str, identity: str) -> None:
        """Remove an address from the whitelist.

        :param caller: Address performing the change; must be the owner.
        :param identity: Address to remove.
        :raises UnauthorizedError: If caller is not the owner.
        """
        self._set_member(caller, identity, False)

    def _set_member(self, caller: str, identity: str, allowed: bool) -> None:
        action = "add to whitelist" if allowed else "remove from whitelist"
        require_owner(self.owner, caller, action)

        address = normalize_identity(identity)
        was_allowed = address in self._members
        if allowed:
            self._members.add(address)
        else:
            self._members.discard(address)

        logger.info(f"Whitelist {address}: {was_allowed} -> {allowed}")
        emit(
            self.listeners,
            ConfigChanged(
                name=f"whitelist:{address}",
                old_value=was_allowed,
                new_value=allowed,
            ),
        )
