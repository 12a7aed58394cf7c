"""Helpers for the server command: cache defaults, interface lookup and
development certificates."""

from __future__ import annotations

import ipaddress
import secrets
import socket
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple, Union

import psutil
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from kes.config import CacheConfig

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

DEFAULT_CACHE_EXPIRY = timedelta(minutes=5)
DEFAULT_CACHE_EXPIRY_UNUSED = timedelta(seconds=30)
DEV_CERTIFICATE_VALIDITY = timedelta(days=90)


def configure_cache(cache: Optional[CacheConfig]) -> CacheConfig:
    """Fill in the default cache settings and return the config.

    A missing config is replaced by an empty one. A zero expiry
    becomes five minutes; a zero unused-expiry sets the expiry to
    thirty seconds.
    """
    if cache is None:
        cache = CacheConfig()
    if cache.expiry == timedelta(0):
        cache.expiry = DEFAULT_CACHE_EXPIRY
    if cache.expiry_unused == timedelta(0):
        cache.expiry = DEFAULT_CACHE_EXPIRY_UNUSED
    return cache


def _to_ip(value: Union[str, IPAddress]) -> IPAddress:
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    return ipaddress.ip_address(str(value).split("%", 1)[0])


def _as_ipv4(ip: IPAddress) -> Optional[ipaddress.IPv4Address]:
    if isinstance(ip, ipaddress.IPv4Address):
        return ip
    return ip.ipv4_mapped


def lookup_interface_ips(listener_ip: Union[str, IPAddress]) -> List[IPAddress]:
    """Return the IPs under which a listener on listener_ip is reachable.

    A specified listener IP is returned as the only element. For an
    unspecified one the addresses of all interfaces that are up are
    collected, skipping link-local and multicast addresses. IPv4
    addresses are preferred; IPv6 ones are returned only if there are
    no IPv4 ones. Raises OSError if no address is found.
    """
    listener = _to_ip(listener_ip)
    if not listener.is_unspecified:
        return [listener]

    stats = psutil.net_if_stats()
    ipv4s: List[IPAddress] = []
    ipv6s: List[IPAddress] = []
    for name, addrs in psutil.net_if_addrs().items():
        stat = stats.get(name)
        if stat is not None and not stat.isup:
            continue
        for addr in addrs:
            if addr.family not in (socket.AF_INET, socket.AF_INET6):
                continue
            try:
                ip = _to_ip(addr.address)
            except ValueError:
                continue
            if ip.is_link_local or ip.is_multicast:
                continue
            ipv4 = _as_ipv4(ip)
            if ipv4 is not None:
                if ipv4 not in ipv4s:
                    ipv4s.append(ipv4)
            elif ip not in ipv6s:
                ipv6s.append(ip)

    if ipv4s:
        return ipv4s
    if ipv6s:
        return ipv6s
    raise OSError("no IPv4 or IPv6 addresses available")


def generate_dev_server_certificate(
    *args: Union[str, IPAddress],
) -> Tuple[x509.Certificate, ec.EllipticCurvePrivateKey]:
    """Create a self-signed P-256 server certificate for 'localhost'.

    The given IPs become subject alternative names. The certificate
    is valid for 90 days from now. Returns the certificate and its
    private key.
    """
    key = ec.generate_private_key(ec.SECP256R1())
    serial = secrets.randbelow(1 << 128)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")])
    now = datetime.now(timezone.utc)

    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(serial)
        .not_valid_before(now)
        .not_valid_after(now + DEV_CERTIFICATE_VALIDITY)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=False,
                crl_sign=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(
            x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]),
            critical=False,
        )
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
    )
    ips = [_to_ip(ip) for ip in args]
    if ips:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.IPAddress(ip) for ip in ips]),
            critical=False,
        )
    certificate = builder.sign(key, hashes.SHA256())
    return certificate, key