import logging
import socket

import pytest

from pingwatch import AddressFamily, ResolutionError, resolve


def fake_getaddrinfo(table):
    def getaddrinfo(host, port, family=0, *args, **kwargs):
        try:
            address = table[(host, family)]
        except KeyError:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known") from None
        sockaddr = (address, 0) if family == socket.AF_INET else (address, 0, 0, 0)
        return [(family, socket.SOCK_RAW, 0, "", sockaddr)]

    return getaddrinfo


@pytest.fixture
def dns(monkeypatch):
    table = {}
    monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo(table))
    return table


def test_first_attempt_keeps_family(dns, caplog):
    dns[("example.test", socket.AF_INET)] = "192.0.2.7"
    caplog.set_level(logging.INFO, logger="pingwatch")

    target = resolve(AddressFamily.V4, "example.test")

    assert target.address == "192.0.2.7"
    assert target.family is AddressFamily.V4
    assert target.name == "example.test"
    assert "Attempting" not in caplog.text


def test_fallback_to_ipv6(dns, caplog):
    dns[("v6only.test", socket.AF_INET6)] = "2001:db8::7"
    caplog.set_level(logging.INFO, logger="pingwatch")

    target = resolve(AddressFamily.V4, "v6only.test")

    assert target.address == "2001:db8::7"
    assert target.family is AddressFamily.V6
    assert (
        "Address v6only.test could not be resolved with argument ip4: "
        "Attempting to resolve as ip6" in caplog.text
    )
    assert "Successfully resolved v6only.test with ip6: Continuing..." in caplog.text


def test_fallback_to_ipv4(dns):
    dns[("v4only.test", socket.AF_INET)] = "198.51.100.3"

    target = resolve(AddressFamily.V6, "v4only.test")

    assert target.address == "198.51.100.3"
    assert target.family is AddressFamily.V4


def test_failed_fallback_is_sticky(dns):
    with pytest.raises(ResolutionError) as excinfo:
        resolve(AddressFamily.V4, "nowhere.test")

    assert excinfo.value.family is AddressFamily.V6
    assert excinfo.value.address == "nowhere.test"
    assert "nowhere.test" in str(excinfo.value)
