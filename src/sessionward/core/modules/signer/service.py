import hmac

from sessionward.core.modules.signer.models import SignatureAlgorithm, SigningKeys
from sessionward.errors import SignatureFormatError


class Signer:
    """HMAC signer over arbitrary bytes.

    Signing always uses the current key. Verification accepts any key in the
    ring so tokens issued before a rotation stay valid until they expire.
    """

    def __init__(self, keys: SigningKeys, algorithm: SignatureAlgorithm | str = SignatureAlgorithm.SHA256) -> None:
        self._keys = keys
        self._algorithm = SignatureAlgorithm(algorithm)

    @property
    def algorithm(self) -> SignatureAlgorithm:
        return self._algorithm

    @property
    def signature_size(self) -> int:
        return self._algorithm.digest_size

    def sign(self, message: bytes) -> bytes:
        return self._mac(self._keys.current, message)

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Check ``signature`` against every candidate key in constant time."""
        if len(signature) != self.signature_size:
            raise SignatureFormatError(f"Expected {self.signature_size}-byte signature, got {len(signature)}")

        # Every candidate is compared so timing does not reveal which key matched
        matched = False
        for key in self._keys.candidates:
            matched |= hmac.compare_digest(self._mac(key, message), signature)
        return matched

    def _mac(self, key: bytes, message: bytes) -> bytes:
        return hmac.new(key, message, self._algorithm.digestmod).digest()
