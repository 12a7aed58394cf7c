"""Server configuration and its validation."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional


class ClientAuth(enum.IntEnum):
    """How the server asks clients for certificates during the TLS handshake."""

    NO_CLIENT_CERT = 0
    REQUEST_CLIENT_CERT = 1
    REQUIRE_ANY_CLIENT_CERT = 2
    VERIFY_CLIENT_CERT_IF_GIVEN = 3
    REQUIRE_AND_VERIFY_CLIENT_CERT = 4


@dataclass
class TLSConfig:
    """The server's TLS configuration.

    At least one of certificates, get_certificate or
    get_config_for_client must provide a server certificate.
    """

    certificates: List[Any] = field(default_factory=list)
    get_certificate: Optional[Callable[..., Any]] = None
    get_config_for_client: Optional[Callable[..., Any]] = None
    client_auth: ClientAuth = ClientAuth.NO_CLIENT_CERT
    min_version: Optional[str] = None
    next_protos: List[str] = field(default_factory=list)


@dataclass
class Policy:
    """A set of allow and deny rules together with the identities bound to it."""

    allow: Dict[str, Any] = field(default_factory=dict)
    deny: Dict[str, Any] = field(default_factory=dict)
    identities: List[str] = field(default_factory=list)


@dataclass
class CacheConfig:
    """How long the server caches keys fetched from the key store.

    expiry: how long a key stays cached; zero or less keeps it as long
    as memory allows.
    expiry_unused: a key not accessed within this interval is evicted;
    ignored if zero or less, or greater than expiry.
    expiry_offline: how long keys stay cached while the key store is
    unreachable; disabled if zero or less.
    """

    expiry: timedelta = timedelta(0)
    expiry_unused: timedelta = timedelta(0)
    expiry_offline: timedelta = timedelta(0)


@dataclass
class RouteConfig:
    """Configuration of a single API route.

    A timeout of zero or less disables timeouts for the route.
    insecure_skip_auth disables authentication for the route.
    """

    timeout: timedelta = timedelta(0)
    insecure_skip_auth: bool = False


@dataclass
class Config:
    """Configuration of a server.

    admin is the admin identity; set it to a non-hex value such as
    "disabled" to turn admin access off. keys is the key store the
    server fetches keys from. A cache of None disables caching.
    """

    admin: str = ""
    tls: Optional[TLSConfig] = None
    cache: Optional[CacheConfig] = None
    policies: Dict[str, Policy] = field(default_factory=dict)
    predefined_keys: List[Any] = field(default_factory=list)
    keys: Any = None
    routes: Dict[str, RouteConfig] = field(default_factory=dict)
    error_log: Optional[logging.Handler] = None
    audit_log: Any = None


def verify_config(config: Optional[Config]) -> None:
    """Check that config has a server certificate, requests client
    certificates and has a key store.

    Raises ValueError describing the first problem found.
    """
    tls = config.tls if config is not None else None
    if tls is None or (
        not tls.certificates
        and tls.get_certificate is None
        and tls.get_config_for_client is None
    ):
        raise ValueError("kes: tls config contains no server certificate")
    if tls.client_auth == ClientAuth.NO_CLIENT_CERT:
        raise ValueError("kes: tls client auth must request client certificate")
    if config.keys is None:
        raise ValueError("kes: config contains no key store")