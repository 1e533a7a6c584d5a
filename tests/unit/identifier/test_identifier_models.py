"""Tests for identifier value types."""

import pytest
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from sessionward.core.modules.identifier.models import IDENTIFIER_SIZE, AccountID, Identifier, SessionID


class TestIdentifier:
    """Tests for Identifier construction and equality."""

    def test_generate_produces_128_bits(self):
        """Test that generated identifiers carry 16 random bytes."""
        assert len(SessionID.generate().raw) == IDENTIFIER_SIZE

    def test_generated_ids_are_unique(self):
        """Test that generated identifiers do not collide."""
        ids = {SessionID.generate() for _ in range(1000)}
        assert len(ids) == 1000

    def test_short_bytes_rejected(self):
        """Test that fewer than 16 bytes cannot form an identifier."""
        with pytest.raises(ValueError, match="at least 16 bytes"):
            Identifier(b"\x00" * 15)

    def test_wire_round_trip(self):
        """Test that the unpadded wire form parses back to the same identifier."""
        session_id = SessionID.generate()
        wire = session_id.to_wire()
        assert "=" not in wire
        assert SessionID.from_wire(wire) == session_id

    def test_from_wire_rejects_garbage(self):
        """Test that a non-base64 wire string raises ValueError."""
        with pytest.raises(ValueError):
            SessionID.from_wire("not base64!")

    def test_equality_is_type_strict(self):
        """Test that identifiers of different kinds never compare equal."""
        raw = b"\x01" * IDENTIFIER_SIZE
        assert SessionID(raw) == SessionID(raw)
        assert SessionID(raw) != AccountID(raw)

    def test_immutable(self):
        """Test that an identifier's bytes cannot be reassigned."""
        session_id = SessionID.generate()
        with pytest.raises(AttributeError):
            session_id.raw = b"\x00" * IDENTIFIER_SIZE  # type: ignore[misc]


class Holder(BaseModel):
    account_id: AccountID


class TestPydanticIntegration:
    """Tests for identifiers used as pydantic fields."""

    def test_accepts_instance(self):
        """Test that an identifier instance is kept as is."""
        account_id = AccountID.generate()
        assert Holder(account_id=account_id).account_id is account_id

    def test_accepts_wire_string_and_bytes(self):
        """Test that wire strings and raw bytes are coerced into identifiers."""
        account_id = AccountID.generate()
        assert Holder(account_id=account_id.to_wire()).account_id == account_id
        assert Holder(account_id=account_id.raw).account_id == account_id

    def test_rejects_other_identifier_kind(self):
        """Test that an identifier of another kind fails validation."""
        with pytest.raises(PydanticValidationError):
            Holder(account_id=SessionID.generate())

    def test_json_uses_wire_form(self):
        """Test that JSON dumps render identifiers in wire form."""
        account_id = AccountID.generate()
        assert Holder(account_id=account_id).model_dump(mode="json") == {"account_id": account_id.to_wire()}
