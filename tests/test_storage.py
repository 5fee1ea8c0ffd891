from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

from clipbird.storage import Storage


@pytest.fixture(scope="module")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="module")
def certificate(rsa_key):
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "host.example.com")])
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(rsa_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=365))
        .sign(rsa_key, hashes.SHA256())
    )


def _pem(cert):
    return cert.public_bytes(serialization.Encoding.PEM)


def test_client_cert_round_trip():
    store = Storage()
    store.set_client_cert("laptop", b"cert-a")
    assert store.has_client_cert("laptop")
    assert store.get_client_cert("laptop") == b"cert-a"
    assert not store.has_client_cert("phone")


def test_missing_client_cert_raises():
    with pytest.raises(KeyError):
        Storage().get_client_cert("nobody")


def test_missing_server_cert_raises():
    with pytest.raises(KeyError):
        Storage().get_server_cert("nobody")


def test_client_and_server_groups_are_separate():
    store = Storage()
    store.set_server_cert("desk", b"server-cert")
    assert store.has_server_cert("desk")
    assert not store.has_client_cert("desk")
    assert store.all_client_certs() == []


def test_all_certs_and_clear_one():
    store = Storage()
    store.set_server_cert("b", b"two")
    store.set_server_cert("a", b"one")
    assert sorted(store.all_server_certs()) == [b"one", b"two"]
    store.clear_server_cert("a")
    assert store.all_server_certs() == [b"two"]
    assert not store.has_server_cert("a")


def test_clear_all_client_certs_keeps_servers():
    store = Storage()
    store.set_client_cert("x", b"1")
    store.set_client_cert("y", b"2")
    store.set_server_cert("z", b"3")
    store.clear_all_client_certs()
    assert store.all_client_certs() == []
    assert store.all_server_certs() == [b"3"]


def test_clear_all_server_certs():
    store = Storage()
    store.set_server_cert("z", b"3")
    store.clear_all_server_certs()
    assert store.all_server_certs() == []


def test_overwrite_cert():
    store = Storage()
    store.set_client_cert("laptop", b"old")
    store.set_client_cert("laptop", b"new")
    assert store.get_client_cert("laptop") == b"new"
    assert store.all_client_certs() == [b"new"]


def test_host_is_server_defaults_false():
    store = Storage()
    assert store.host_is_server() is False
    store.set_host_is_server(True)
    assert store.host_is_server() is True
    store.set_host_is_server(False)
    assert store.host_is_server() is False


def test_host_cert_round_trip(certificate):
    store = Storage()
    assert not store.has_host_cert()
    store.set_host_cert(_pem(certificate))
    assert store.has_host_cert()
    assert store.get_host_cert() == certificate


def test_host_cert_accepts_certificate_object(certificate):
    store = Storage()
    store.set_host_cert(certificate)
    assert store.get_host_cert() == certificate


def test_invalid_host_cert_is_treated_as_absent():
    store = Storage()
    store.set_host_cert(b"not a certificate")
    assert not store.has_host_cert()
    with pytest.raises(KeyError):
        store.get_host_cert()


def test_host_key_round_trip(rsa_key):
    store = Storage()
    assert not store.has_host_key()
    store.set_host_key(rsa_key)
    assert store.has_host_key()
    assert store.get_host_key().private_numbers() == rsa_key.private_numbers()


def test_non_rsa_key_is_rejected():
    ec_key = ec.generate_private_key(ec.SECP256R1())
    pem = ec_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    store = Storage()
    store.set_host_key(pem)
    assert not store.has_host_key()
    with pytest.raises(KeyError):
        store.get_host_key()


def test_persists_to_file(tmp_path, certificate, rsa_key):
    path = tmp_path / "settings.json"
    store = Storage(path)
    store.set_client_cert("laptop", b"\x00\xffbinary")
    store.set_server_cert("desk", b"server")
    store.set_host_cert(certificate)
    store.set_host_key(rsa_key)
    store.set_host_is_server(True)

    reloaded = Storage(path)
    assert reloaded.get_client_cert("laptop") == b"\x00\xffbinary"
    assert reloaded.get_server_cert("desk") == b"server"
    assert reloaded.get_host_cert() == certificate
    assert reloaded.get_host_key().private_numbers() == rsa_key.private_numbers()
    assert reloaded.host_is_server() is True


def test_removal_persists(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    store = Storage(path)
    store.set_client_cert("laptop", b"c")
    store.clear_client_cert("laptop")
    assert not Storage(path).has_client_cert("laptop")