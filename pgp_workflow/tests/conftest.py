from collections.abc import Callable
from dataclasses import dataclass
from unittest.mock import AsyncMock, Mock

import pgpy
import pytest
from pgpy.constants import (
    CompressionAlgorithm,
    HashAlgorithm,
    KeyFlags,
    PubKeyAlgorithm,
    SymmetricKeyAlgorithm,
)

from pgp_workflow.config import WorkflowConfig
from pgp_workflow.models.operation import VerificationResult

PASSPHRASE = "password123"
USER_ID = "Test User <test@example.com>"

ENCRYPTED_ARMOR = "-----BEGIN PGP MESSAGE-----\n\nwcBMA0ciphertext\n=abcd\n-----END PGP MESSAGE-----\n"
SIGNED_ARMOR = (
    "-----BEGIN PGP SIGNED MESSAGE-----\nHash: SHA256\n\nVerify Me\n"
    "-----BEGIN PGP SIGNATURE-----\n\nwsBcBAEBCAAQsignature\n=efgh\n-----END PGP SIGNATURE-----\n"
)


@dataclass(frozen=True)
class KeyPair:
    private_armored: str
    public_armored: str
    passphrase: str


def _create_test_key(passphrase: str | None, name: str = "Test User") -> pgpy.PGPKey:
    key = pgpy.PGPKey.new(PubKeyAlgorithm.RSAEncryptOrSign, 2048)
    uid = pgpy.PGPUID.new(name, email="test@example.com")
    key.add_uid(
        uid,
        usage={KeyFlags.Sign, KeyFlags.EncryptCommunications, KeyFlags.EncryptStorage},
        hashes=[HashAlgorithm.SHA256],
        ciphers=[SymmetricKeyAlgorithm.AES256],
        compression=[CompressionAlgorithm.Uncompressed],
    )
    if passphrase is not None:
        key.protect(passphrase, SymmetricKeyAlgorithm.AES256, HashAlgorithm.SHA256)
    return key


@pytest.fixture(scope="session")
def key_pair() -> KeyPair:
    key = _create_test_key(PASSPHRASE)
    return KeyPair(
        private_armored=str(key),
        public_armored=str(key.pubkey),
        passphrase=PASSPHRASE,
    )


@pytest.fixture(scope="session")
def other_key_pair() -> KeyPair:
    key = _create_test_key(PASSPHRASE, name="Someone Else")
    return KeyPair(
        private_armored=str(key),
        public_armored=str(key.pubkey),
        passphrase=PASSPHRASE,
    )


@pytest.fixture(scope="session")
def unprotected_key_pair() -> KeyPair:
    key = _create_test_key(None)
    return KeyPair(private_armored=str(key), public_armored=str(key.pubkey), passphrase="")


@pytest.fixture
def config() -> WorkflowConfig:
    return WorkflowConfig(debounce_seconds=0)


@pytest.fixture
def make_handle() -> Callable[..., Mock]:
    def _make(
        *,
        private: bool = False,
        locked: bool = False,
        user_ids: tuple[str, ...] = (USER_ID,),
        fingerprint: str = "AAAA1111",
    ) -> Mock:
        handle = Mock()
        handle.is_private = private
        handle.is_locked = locked
        handle.user_ids = user_ids
        handle.fingerprint = fingerprint
        return handle

    return _make


@pytest.fixture
def mock_provider(make_handle: Callable[..., Mock]) -> Mock:
    provider = Mock()
    provider.parse_key = AsyncMock(return_value=make_handle())
    provider.unlock_key = AsyncMock(return_value=make_handle(private=True))
    provider.encrypt = AsyncMock(return_value=ENCRYPTED_ARMOR)
    provider.decrypt = AsyncMock(return_value="plaintext")
    provider.sign = AsyncMock(return_value=SIGNED_ARMOR)
    provider.verify = AsyncMock(
        return_value=VerificationResult(verified=True, signer_identity=(USER_ID,), text="Verify Me")
    )
    return provider
