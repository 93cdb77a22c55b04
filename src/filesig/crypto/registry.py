"""Key registry: the signing key pair and the accepted verification key set.

The registry parses its KeyConfig once into an immutable snapshot. Readers
take the current snapshot reference without locking; ``reload`` builds a
complete new snapshot and swaps it in, so a concurrent verification sees
either the old accepted set or the new one, never a mix.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from filesig.config import KeyConfig
from filesig.crypto.keys import (
    key_id,
    load_private_key,
    load_public_key,
    public_key_to_spki_base64,
    raw_public_key,
)
from filesig.errors import ConfigurationError
from filesig.models import KeyDiscoveryDocument
from filesig.observability import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AcceptedKey:
    """A trusted verification key with its canonical transport token."""

    token: str
    public_key: Ed25519PublicKey
    key_id: str
    current: bool


@dataclass(frozen=True)
class _Snapshot:
    private_key: Ed25519PrivateKey | None
    signing_error: ConfigurationError | None
    current: AcceptedKey | None
    history: tuple[AcceptedKey, ...]


def _accepted(public_key: Ed25519PublicKey, current: bool) -> AcceptedKey:
    return AcceptedKey(
        token=public_key_to_spki_base64(public_key),
        public_key=public_key,
        key_id=key_id(public_key),
        current=current,
    )


def _build_snapshot(config: KeyConfig) -> _Snapshot:
    private_key: Ed25519PrivateKey | None = None
    signing_error: ConfigurationError | None = None
    if config.private_key is not None:
        try:
            private_key = load_private_key(config.private_key)
        except ConfigurationError as e:
            # Verification does not need the private half; surface on sign.
            signing_error = e

    current_public: Ed25519PublicKey | None = None
    if config.public_key is not None:
        current_public = load_public_key(config.public_key)
    elif private_key is not None:
        current_public = private_key.public_key()

    if private_key is not None and current_public is not None:
        if raw_public_key(private_key.public_key()) != raw_public_key(current_public):
            private_key = None
            signing_error = ConfigurationError(
                "configured public key does not match the private key",
                details={"public_key_id": key_id(current_public)},
            )

    current = _accepted(current_public, current=True) if current_public is not None else None

    history: list[AcceptedKey] = []
    seen = {current.token} if current is not None else set()
    for token in config.historical_public_keys:
        entry = _accepted(load_public_key(token), current=False)
        if entry.token in seen:
            continue
        seen.add(entry.token)
        history.append(entry)

    return _Snapshot(
        private_key=private_key,
        signing_error=signing_error,
        current=current,
        history=tuple(history),
    )


class KeyRegistry:
    """Resolves the current signing key pair and the accepted public keys.

    Raises ConfigurationError at construction when any configured public key
    is malformed. A missing or malformed private key only fails signing;
    such a registry still verifies.

    Example:
        >>> registry = KeyRegistry(KeyConfig.from_env())
        >>> registry.get_accepted_public_keys()[0] == registry.discovery_document().current
        True
    """

    def __init__(self, config: KeyConfig) -> None:
        self._lock = threading.Lock()
        self._snapshot = _build_snapshot(config)
        self._log_loaded("filesig.keys.loaded")

    @classmethod
    def from_env(cls) -> KeyRegistry:
        return cls(KeyConfig.from_env())

    def reload(self, config: KeyConfig) -> None:
        """Replace the whole key set. On ConfigurationError the old set stays active."""
        snapshot = _build_snapshot(config)
        with self._lock:
            self._snapshot = snapshot
        self._log_loaded("filesig.keys.reloaded")

    def _log_loaded(self, event: str) -> None:
        snap = self._snapshot
        logger.info(
            event,
            current_key_id=snap.current.key_id if snap.current else None,
            history_count=len(snap.history),
            signing_enabled=snap.private_key is not None,
        )
        if snap.signing_error is not None:
            logger.warning("filesig.keys.signing_unavailable", reason=snap.signing_error.reason)

    @property
    def is_signing_enabled(self) -> bool:
        return self._snapshot.private_key is not None

    def get_signing_key_pair(self) -> tuple[Ed25519PrivateKey, Ed25519PublicKey]:
        snap = self._snapshot
        if snap.private_key is None:
            if snap.signing_error is not None:
                raise snap.signing_error
            raise ConfigurationError("no private key configured; registry is verification-only")
        # current is always set when a private key is present
        assert snap.current is not None
        return (snap.private_key, snap.current.public_key)

    def get_accepted_keys(self) -> list[AcceptedKey]:
        """Accepted keys, current first, then history in configured order."""
        snap = self._snapshot
        if snap.current is None:
            raise ConfigurationError("no current public key configured")
        return [snap.current, *snap.history]

    def get_accepted_public_keys(self) -> list[str]:
        return [entry.token for entry in self.get_accepted_keys()]

    def discovery_document(self) -> KeyDiscoveryDocument:
        keys = self.get_accepted_public_keys()
        return KeyDiscoveryDocument(current=keys[0], history=keys[1:])
