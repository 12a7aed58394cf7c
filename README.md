# kes

Building blocks of a key management server that authenticates clients by
their TLS certificate, and of the command-line client that talks to it.

## What is in the package

- `kes.config`: the server configuration as dataclasses (`Config`,
  `TLSConfig`, `ClientAuth`, `Policy`, `CacheConfig`, `RouteConfig`) and
  `verify_config`, which raises `ValueError` if the configuration has no
  server certificate, does not request client certificates, or has no key
  store.
- `kes.api.messages`: the JSON request and response messages of the server
  API as dataclasses, with `encode` (compact JSON; bytes as base64, times as
  RFC 3339, HTML-sensitive characters escaped) and `decode` (unknown fields
  ignored, invalid data raises `ValueError`).
- `kes.api.multicast`: `Multicast`, a one-to-many writer whose members can be
  added and removed from several threads, and `LogWriter`, which turns each
  write into one JSON error log event line.
- `kes.terminal`: `Style` (ANSI styling that renders plain text under the
  ASCII colour profile), `Buffer` (a chainable string builder), `fg`,
  `is_terminal`, and `fatal` / `fatalf` / `check` / `checkf`, which print an
  error and exit with status 1.
- `kes.cmd.color`: `ColorOption`, the `always` / `auto` / `never` colour
  switch.
- `kes.cmd.completion`: bash and zsh completion (`complete`,
  `install_auto_completion`, `is_completion_installed`).
- `kes.cmd.client`: `normalize_endpoints` and `decode_private_key`, which
  finds the first PEM private key block.
- `kes.cmd.metric`: `avg_latency`, the mean of a cumulative latency
  histogram.
- `kes.cmd.server`: `configure_cache`, `lookup_interface_ips` and
  `generate_dev_server_certificate`, a self-signed P-256 certificate for
  `localhost`.

## Installation

Python 3.10 or later. The package depends on `cryptography` and `psutil`;
the `test` extra adds `pytest`.

## Examples

Check a server configuration:

```python
from kes.config import ClientAuth, Config, TLSConfig, verify_config

config = Config(tls=TLSConfig(certificates=["cert"],
                              client_auth=ClientAuth.REQUIRE_ANY_CLIENT_CERT))
verify_config(config)   # ValueError: kes: config contains no key store
```

Encode and decode API messages:

```python
from kes.api.messages import ErrorLogEvent, ListKeysResponse, decode, encode

encode(ErrorLogEvent(message="a < b"))   # b'{"message":"a \\u003c b"}'
decode(ListKeysResponse, b'{"names":["my-key"]}').names   # ['my-key']
```

Fan writes out to several subscribers:

```python
import io
from kes.api.multicast import Multicast

group = Multicast()
first, second = io.BytesIO(), io.BytesIO()
group.add(first)
group.add(second)
group.write(b"event\n")   # both buffers now hold b"event\n"
len(group)               # 2
```

Normalise server endpoints and average a latency histogram:

```python
from datetime import timedelta
from kes.cmd.client import normalize_endpoints
from kes.cmd.metric import avg_latency

normalize_endpoints("127.0.0.1:7373, http://kes.example.com")
# ['https://127.0.0.1:7373', 'https://kes.example.com']

avg_latency({timedelta(milliseconds=10): 5, timedelta(milliseconds=20): 10})
# timedelta(microseconds=15000)
```

Note that `configure_cache` sets the expiry to thirty seconds when
`expiry_unused` is zero, overriding the five-minute default it applies to a
zero expiry.

## What the package does not do

There is no server here: nothing listens for connections, routes HTTP
requests, authenticates clients, enforces policies, caches keys or writes
audit logs. There is no key store and no client that talks to a server over
the network. The package installs no command; `complete` and
`install_auto_completion` are functions to be called from a program of your
own.

## Running the tests

With the `test` extra installed, run `pytest` from the repository root.