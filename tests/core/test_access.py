"""Unit tests for the location access policy.

Pure function tests - no mocks needed.
"""

from src.core.access import (
    REASON_LOCAL_NETWORK,
    AccessDecision,
    IPLocation,
    decide_access,
    fail_open,
    get_client_ip,
    is_local_address,
)
from src.core.geo import Coordinate


class TestGetClientIp:
    """Tests for get_client_ip()."""

    def test_first_forwarded_entry(self):
        """The first X-Forwarded-For entry is the client."""
        headers = {"X-Forwarded-For": "203.0.113.5, 10.0.0.1"}
        assert get_client_ip(headers) == "203.0.113.5"

    def test_lowercase_header_names(self):
        """Lower-case header names are accepted."""
        assert get_client_ip({"x-forwarded-for": "203.0.113.5"}) == "203.0.113.5"

    def test_falls_back_to_real_ip(self):
        """X-Real-IP is used when X-Forwarded-For is missing."""
        assert get_client_ip({"X-Real-IP": " 198.51.100.7 "}) == "198.51.100.7"

    def test_falls_back_to_remote_addr(self):
        """The socket address is the last resort."""
        assert get_client_ip({}, "192.0.2.1") == "192.0.2.1"

    def test_nothing_available(self):
        """No headers and no socket address gives None."""
        assert get_client_ip({}) is None
        assert get_client_ip({}, "") is None


class TestIsLocalAddress:
    """Tests for is_local_address()."""

    def test_loopback(self):
        """IPv4 and IPv6 loopback are local."""
        assert is_local_address("127.0.0.1") is True
        assert is_local_address("::1") is True

    def test_private_ranges(self):
        """192.168.x and 10.x are local."""
        assert is_local_address("192.168.1.20") is True
        assert is_local_address("10.4.0.3") is True

    def test_public_address(self):
        """Public addresses are not local."""
        assert is_local_address("203.0.113.5") is False


class TestFailOpen:
    """Tests for fail_open()."""

    def test_grants_access_with_reason(self):
        """Fail-open decisions allow access and explain why."""
        decision = fail_open(REASON_LOCAL_NETWORK)
        assert decision == AccessDecision(allowed=True, reason=REASON_LOCAL_NETWORK)
        assert decision.to_dict() == {"allowed": True, "reason": REASON_LOCAL_NETWORK}


class TestDecideAccess:
    """Tests for decide_access()."""

    def test_inside_radius_allowed(self):
        """A location near Salina is allowed with no reason."""
        location = IPLocation(
            coordinate=Coordinate(38.9172, -97.2139),
            city="Abilene",
            state="KS",
            zip_code="67410",
        )
        decision = decide_access(location)

        assert decision.allowed is True
        assert decision.reason is None
        assert decision.to_dict() == {
            "allowed": True,
            "location": {"city": "Abilene", "state": "KS", "zip": "67410"},
        }

    def test_far_but_in_state_allowed(self):
        """Region match grants access outside the radius."""
        location = IPLocation(coordinate=Coordinate(39.1141, -94.6275), state="Kansas")
        assert decide_access(location).allowed is True

    def test_out_of_area_denied_with_reason(self):
        """Denver, CO is denied with a readable reason."""
        location = IPLocation(
            coordinate=Coordinate(39.7392, -104.9903),
            city="Denver",
            state="CO",
        )
        decision = decide_access(location)

        assert decision.allowed is False
        assert decision.reason == (
            "Access is limited to residents within 50 miles of Salina, Kansas. "
            "Your location appears to be in Denver, CO."
        )
        assert decision.location == {"city": "Denver", "state": "CO", "zip": None}
