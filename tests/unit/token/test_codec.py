"""Tests for the token codec."""

import pytest

from sessionward.core.modules.identifier.models import AccountID, SessionID, TokenID
from sessionward.core.modules.signer.models import SigningKeys
from sessionward.core.modules.signer.service import Signer
from sessionward.core.modules.token.codec import TokenCodec, cookie_name_for_origin
from sessionward.utils import b64url_decode, b64url_encode


class TestEncodeDecode:
    """Tests for the encode/decode contract."""

    def test_round_trip(self, session_codec):
        """Test that decoding an encoded identifier returns it unchanged."""
        for _ in range(50):
            session_id = SessionID.generate()
            assert session_codec.decode(session_codec.encode(session_id)) == session_id

    def test_decoded_type_matches_codec(self, session_codec):
        """Test that the codec produces its configured identifier type."""
        decoded = session_codec.decode(session_codec.encode(SessionID.generate()))
        assert isinstance(decoded, SessionID)

    def test_wire_layout_is_signature_then_identifier(self, session_codec, signer):
        """Test that the token is the signature followed by the raw identifier."""
        session_id = SessionID.generate()
        data = b64url_decode(session_codec.encode(session_id))
        assert data is not None
        assert len(data) == 32 + 16
        assert data[:32] == signer.sign(session_id.raw)
        assert data[32:] == session_id.raw

    def test_token_is_url_safe_without_padding(self, session_codec):
        """Test that tokens only use the unpadded base64url alphabet."""
        token = session_codec.encode(SessionID.generate())
        assert all(char.isalnum() or char in "-_" for char in token)

    def test_other_key_rejected(self, session_codec):
        """Test that a token signed with a foreign key does not decode."""
        foreign = TokenCodec(Signer(SigningKeys(b"foreign-key")), SessionID)
        assert session_codec.decode(foreign.encode(SessionID.generate())) is None

    def test_oversized_identifier_not_encoded(self, session_codec):
        """Test that only fixed-size identifiers can be turned into tokens."""
        with pytest.raises(ValueError, match="16-byte"):
            session_codec.encode(SessionID(b"\x01" * 24))


class TestTamperDetection:
    """Tests for modified tokens."""

    def test_any_single_byte_flip_rejected(self, session_codec):
        """Test that flipping any bit of any byte invalidates the token."""
        token = session_codec.encode(SessionID.generate())
        data = b64url_decode(token)
        assert data is not None
        for index in range(len(data)):
            tampered = bytearray(data)
            tampered[index] ^= 0x01
            assert session_codec.decode(b64url_encode(bytes(tampered))) is None

    def test_appended_bytes_rejected(self, session_codec):
        """Test that trailing bytes after the identifier are rejected."""
        data = b64url_decode(session_codec.encode(SessionID.generate()))
        assert data is not None
        assert session_codec.decode(b64url_encode(data + b"\x00")) is None

    def test_purpose_token_reshaped_as_session_token_rejected(self, signer, session_codec):
        """Test that a purpose token repacked with its purpose prefix is not a session token."""
        purpose_codec = TokenCodec(signer, TokenID)
        token_id = TokenID.generate()
        data = b64url_decode(purpose_codec.encode(token_id, purpose="password-reset"))
        assert data is not None

        reshaped = b64url_encode(data[:32] + b"password-reset:" + token_id.raw)

        assert session_codec.decode(reshaped) is None


class TestMalformedInput:
    """Tests for inputs that are not tokens at all."""

    @pytest.mark.parametrize(
        "token",
        [
            "",
            "!!!!",
            "a",
            "abc=",
            "aGVsbG8",
            "a b c",
            "éééé",
        ],
    )
    def test_rejected_without_raising(self, session_codec, token):
        """Test that malformed input decodes to None instead of raising."""
        assert session_codec.decode(token) is None

    def test_truncated_token_rejected(self, session_codec):
        """Test that shortened tokens are rejected."""
        token = session_codec.encode(SessionID.generate())
        assert session_codec.decode(token[:-4]) is None
        assert session_codec.decode(token[:40]) is None


class TestPurposeBinding:
    """Tests for purpose-bound tokens."""

    def test_purpose_round_trip(self, session_codec):
        """Test that a token decodes under the purpose it was issued for."""
        session_id = SessionID.generate()
        token = session_codec.encode(session_id, purpose="email-verify")
        assert session_codec.decode(token, purpose="email-verify") == session_id

    def test_cross_purpose_rejected(self, session_codec):
        """Test that a token does not decode under another or no purpose."""
        token = session_codec.encode(SessionID.generate(), purpose="email-verify")
        assert session_codec.decode(token, purpose="password-reset") is None
        assert session_codec.decode(token) is None

    def test_unscoped_token_not_accepted_for_purpose(self, session_codec):
        """Test that a token without a purpose does not satisfy a purpose check."""
        token = session_codec.encode(SessionID.generate())
        assert session_codec.decode(token, purpose="password-reset") is None


class TestCookieNameForOrigin:
    """Tests for per-origin cookie names."""

    def test_stable_and_distinct_per_origin(self):
        """Test that names are stable for an origin and differ between origins."""
        first = cookie_name_for_origin("__session", "https://a.example")
        assert first == cookie_name_for_origin("__session", "https://a.example")
        assert first != cookie_name_for_origin("__session", "https://b.example")

    def test_shape(self):
        """Test that the name is the base plus 16 hex digits."""
        name = cookie_name_for_origin("__session", "https://a.example")
        prefix, digest = name.rsplit("_", 1)
        assert prefix == "__session"
        assert len(digest) == 16
        int(digest, 16)

    def test_account_codec_produces_account_ids(self, signer):
        """Test that a codec bound to AccountID decodes AccountIDs."""
        codec = TokenCodec(signer, AccountID)
        account_id = AccountID.generate()
        assert codec.decode(codec.encode(account_id)) == account_id
