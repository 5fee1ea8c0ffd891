# clipbird

The core of a clipboard-sharing tool for machines on the same local network.
One host acts as a server and the others join it as clients. Clipboard
contents are then shared across the group.

The package holds the parts that do not depend on a GUI:

- **`clipbird.packets`** holds the fixed-layout, big-endian wire packets:
  - `Authentication`
  - `InvalidRequest`
  - `PingPacket`

  It also holds their enums (`AuthStatus`, `ErrorCode`, `PingType`) and their
  errors (`PacketError`, `MalformedPacket`, `NotThisPacket`).
- **`clipbird.syncing`** holds the clipboard sync packet. A `SyncingPacket` is
  made of `SyncingItem` entries, each a MIME type with its payload.
- **`clipbird.constants`** holds application constants and paths:
  - `app_home`
  - `app_log_file`
  - `mdns_service_name`
  - `mdns_service_type`
- **`clipbird.storage`** has `Storage`. It keeps trusted client and server
  certificates, the host certificate and RSA key, and the last host role. It
  can hold them in memory only, or in a JSON file that is rewritten after
  every change.
- **`clipbird.history`** has `ClipboardHistory`, a bounded list of received
  clipboard contents with the newest first. It holds 20 entries by default.
- **`clipbird.discovery`** holds service discovery bookkeeping:
  - `Device`
  - `Browser`
  - `decode_service_name`

  `Browser` is fed browse, resolve and remove events by the caller. It
  reports servers that appear and disappear through callbacks.
- **`clipbird.network`** holds helpers for joining a group:
  - `qr_code_info` builds the compact JSON that gives a server's port and its
    IPv4 addresses.
  - `is_valid_endpoint` checks an address and port.
  - `cert_needs_renewal` tells whether the host certificate must be replaced.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

A packet built with `build` can be turned into bytes and read back:

```python
from clipbird.packets import AuthStatus, Authentication, PingPacket, PingType
from clipbird.syncing import SyncingPacket

auth = Authentication.build(AuthStatus.AUTH_OKAY)
wire = auth.to_bytes()
assert Authentication.from_bytes(wire).auth_status == AuthStatus.AUTH_OKAY

ping = PingPacket.from_bytes(PingPacket.build(PingType.PING).to_bytes())

sync = SyncingPacket.build([("text/plain", b"Hello World")])
restored = SyncingPacket.from_bytes(sync.to_bytes())
```

Reading bytes of the wrong packet kind raises `NotThisPacket`. Reading
truncated or corrupt bytes raises `MalformedPacket`.

## What it does not do

This package gives a clipboard-sharing program its building blocks, not the
program itself. It has no command to run and no window or tray icon. It
neither reads nor writes the system clipboard. It opens no sockets, runs no
TLS server or client, and does not talk to an mDNS daemon itself; the caller
feeds `Browser` its events. It stores peer certificates, but it does not
decide whether a connecting peer should be accepted.