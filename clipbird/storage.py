"""Persistent settings: trusted peer certificates and host identity.

Values live in three groups, ``client``, ``server`` and ``common``. When a
path is given the settings are loaded from it and written back as JSON
after every change; without one they are kept in memory only.
"""

from __future__ import annotations

import base64
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

_CLIENT_GROUP = "client"
_SERVER_GROUP = "server"
_COMMON_GROUP = "common"

_HOST_STATE_KEY = "hostState"
_HOST_KEY_KEY = "hostKey"
_HOST_CERT_KEY = "hostCert"


def _encode(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def _decode(value: str) -> bytes:
    return base64.b64decode(value.encode("ascii"))


def _load_certificate(pem: bytes | None) -> x509.Certificate | None:
    if not pem:
        return None
    try:
        return x509.load_pem_x509_certificate(pem)
    except ValueError:
        return None


def _load_rsa_key(pem: bytes | None) -> rsa.RSAPrivateKey | None:
    if not pem:
        return None
    try:
        key = serialization.load_pem_private_key(pem, None)
    except (ValueError, TypeError):
        return None
    return key if isinstance(key, rsa.RSAPrivateKey) else None


class Storage:
    """Key-value store for certificates and the last host role."""

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._lock = threading.RLock()
        self._groups: dict[str, dict[str, Any]] = {
            _CLIENT_GROUP: {},
            _SERVER_GROUP: {},
            _COMMON_GROUP: {},
        }
        if self._path is not None and self._path.exists():
            loaded = json.loads(self._path.read_text(encoding="utf-8"))
            for group, values in loaded.items():
                if group in self._groups and isinstance(values, dict):
                    self._groups[group].update(values)

    # ------------------------------------------------------------ internals

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".settings-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._groups, handle, indent=2, sort_keys=True)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _set_bytes(self, group: str, name: str, value: bytes) -> None:
        with self._lock:
            self._groups[group][name] = _encode(bytes(value))
            self._save()

    def _get_bytes(self, group: str, name: str) -> bytes | None:
        with self._lock:
            value = self._groups[group].get(name)
        return None if value is None else _decode(value)

    def _require_bytes(self, group: str, name: str) -> bytes:
        value = self._get_bytes(group, name)
        if value is None:
            raise KeyError("name not found")
        return value

    def _all_bytes(self, group: str) -> list[bytes]:
        with self._lock:
            entries = sorted(self._groups[group].items())
        return [_decode(value) for _, value in entries]

    def _remove(self, group: str, name: str) -> None:
        with self._lock:
            self._groups[group].pop(name, None)
            self._save()

    def _clear(self, group: str) -> None:
        with self._lock:
            self._groups[group].clear()
            self._save()

    # -------------------------------------------------------------- clients

    def set_client_cert(self, name: str, cert: bytes) -> None:
        """Remember the certificate of a trusted client."""
        self._set_bytes(_CLIENT_GROUP, name, cert)

    def has_client_cert(self, name: str) -> bool:
        return self._get_bytes(_CLIENT_GROUP, name) is not None

    def get_client_cert(self, name: str) -> bytes:
        """Return a client's certificate; raise KeyError if unknown."""
        return self._require_bytes(_CLIENT_GROUP, name)

    def all_client_certs(self) -> list[bytes]:
        return self._all_bytes(_CLIENT_GROUP)

    def clear_client_cert(self, name: str) -> None:
        self._remove(_CLIENT_GROUP, name)

    def clear_all_client_certs(self) -> None:
        self._clear(_CLIENT_GROUP)

    # -------------------------------------------------------------- servers

    def set_server_cert(self, name: str, cert: bytes) -> None:
        """Remember the certificate of a trusted server."""
        self._set_bytes(_SERVER_GROUP, name, cert)

    def has_server_cert(self, name: str) -> bool:
        return self._get_bytes(_SERVER_GROUP, name) is not None

    def get_server_cert(self, name: str) -> bytes:
        """Return a server's certificate; raise KeyError if unknown."""
        return self._require_bytes(_SERVER_GROUP, name)

    def all_server_certs(self) -> list[bytes]:
        return self._all_bytes(_SERVER_GROUP)

    def clear_server_cert(self, name: str) -> None:
        self._remove(_SERVER_GROUP, name)

    def clear_all_server_certs(self) -> None:
        self._clear(_SERVER_GROUP)

    # ---------------------------------------------------------- host identity

    def set_host_cert(self, pem: bytes | x509.Certificate) -> None:
        """Store this host's certificate, given as PEM or a certificate."""
        if isinstance(pem, x509.Certificate):
            pem = pem.public_bytes(serialization.Encoding.PEM)
        self._set_bytes(_COMMON_GROUP, _HOST_CERT_KEY, pem)

    def has_host_cert(self) -> bool:
        """True when a valid certificate is stored."""
        return _load_certificate(self._get_bytes(_COMMON_GROUP, _HOST_CERT_KEY)) is not None

    def get_host_cert(self) -> x509.Certificate:
        """Return this host's certificate; raise KeyError if none is valid."""
        cert = _load_certificate(self._get_bytes(_COMMON_GROUP, _HOST_CERT_KEY))
        if cert is None:
            raise KeyError("name not found")
        return cert

    def set_host_key(self, pem: bytes | rsa.RSAPrivateKey) -> None:
        """Store this host's RSA private key, given as PEM or a key."""
        if isinstance(pem, rsa.RSAPrivateKey):
            pem = pem.private_bytes(
                serialization.Encoding.PEM,
                serialization.PrivateFormat.TraditionalOpenSSL,
                serialization.NoEncryption(),
            )
        self._set_bytes(_COMMON_GROUP, _HOST_KEY_KEY, pem)

    def has_host_key(self) -> bool:
        """True when a valid RSA private key is stored."""
        return _load_rsa_key(self._get_bytes(_COMMON_GROUP, _HOST_KEY_KEY)) is not None

    def get_host_key(self) -> rsa.RSAPrivateKey:
        """Return this host's RSA key; raise KeyError if none is valid."""
        key = _load_rsa_key(self._get_bytes(_COMMON_GROUP, _HOST_KEY_KEY))
        if key is None:
            raise KeyError("name not found")
        return key

    # ------------------------------------------------------------- host role

    def set_host_is_server(self, is_server: bool) -> None:
        """Remember whether this host last acted as the server."""
        with self._lock:
            self._groups[_COMMON_GROUP][_HOST_STATE_KEY] = bool(is_server)
            self._save()

    def host_is_server(self) -> bool:
        """Whether this host last acted as the server; False if never set."""
        with self._lock:
            value = self._groups[_COMMON_GROUP].get(_HOST_STATE_KEY)
        return bool(value) if value is not None else False