import pytest

from kes.config import (
    CacheConfig,
    ClientAuth,
    Config,
    Policy,
    TLSConfig,
    verify_config,
)


def _valid_config(**tls_overrides):
    tls_args = {"certificates": ["cert"], "client_auth": ClientAuth.REQUIRE_ANY_CLIENT_CERT}
    tls_args.update(tls_overrides)
    return Config(admin="disabled", tls=TLSConfig(**tls_args), keys=object())


def test_none_config_rejected():
    with pytest.raises(ValueError, match="contains no server certificate"):
        verify_config(None)


def test_missing_tls_rejected():
    with pytest.raises(ValueError, match="contains no server certificate"):
        verify_config(Config(keys=object()))


def test_tls_without_certificate_rejected():
    config = _valid_config(certificates=[])
    with pytest.raises(ValueError, match="contains no server certificate"):
        verify_config(config)


def test_get_certificate_counts_as_certificate():
    config = _valid_config(certificates=[], get_certificate=lambda hello: "cert")
    assert verify_config(config) is None
    assert config.tls.certificates == []


def test_get_config_for_client_counts_as_certificate():
    config = _valid_config(certificates=[], get_config_for_client=lambda hello: None)
    assert verify_config(config) is None
    assert config.tls.get_certificate is None


def test_no_client_cert_rejected():
    config = _valid_config(client_auth=ClientAuth.NO_CLIENT_CERT)
    with pytest.raises(ValueError, match="must request client certificate"):
        verify_config(config)


@pytest.mark.parametrize(
    "auth",
    [
        ClientAuth.REQUEST_CLIENT_CERT,
        ClientAuth.REQUIRE_ANY_CLIENT_CERT,
        ClientAuth.VERIFY_CLIENT_CERT_IF_GIVEN,
        ClientAuth.REQUIRE_AND_VERIFY_CLIENT_CERT,
    ],
)
def test_requesting_client_auth_accepted(auth):
    config = _valid_config(client_auth=auth)
    assert verify_config(config) is None
    assert config.tls.client_auth == auth


def test_missing_key_store_rejected():
    config = _valid_config()
    config.keys = None
    with pytest.raises(ValueError, match="contains no key store"):
        verify_config(config)


def test_policies_do_not_share_state():
    first, second = Policy(), Policy()
    first.allow["/v1/status"] = object()
    first.identities.append("abc")
    assert second.allow == {}
    assert second.identities == []


def test_cache_config_keeps_values():
    from datetime import timedelta

    cache = CacheConfig(expiry=timedelta(minutes=5), expiry_unused=timedelta(seconds=30))
    assert cache.expiry == timedelta(minutes=5)
    assert cache.expiry_unused == timedelta(seconds=30)
    assert cache.expiry_offline == timedelta(0)