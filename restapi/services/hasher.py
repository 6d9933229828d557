"""
Argon2id password hashing with a self-describing encoded format.

Encoded hashes look like:

    $argon2id$v=19$m=65536,t=3,p=2$<salt>$<key>

Salt and key are unpadded standard base64. The cost parameters travel with
the hash, so a stored hash keeps verifying after the defaults change.

Hasher instances hold no mutable state and can be shared across threads.
"""

import base64
import binascii
import hmac
import re
import secrets
from dataclasses import dataclass
from functools import cached_property

from argon2.exceptions import HashingError
from argon2.low_level import ARGON2_VERSION, Type, hash_secret_raw

ALGORITHM_TAG = "argon2id"

_VERSION_RE = re.compile(r"v=(\d+)")
_PARAMS_RE = re.compile(r"m=(\d+),t=(\d+),p=(\d+)")

# Argon2 stores memory and iterations as uint32, lanes in 24 bits
MAX_UINT32 = 2**32 - 1
MAX_PARALLELISM = 2**24 - 1


class HasherError(Exception):
    """Base class for credential hasher failures."""


class InvalidHashFormat(HasherError):
    pass


class UnsupportedVersion(HasherError):
    pass


class MalformedParameters(HasherError):
    pass


class InvalidEncoding(HasherError):
    pass


class RandomSourceError(HasherError):
    pass


class DerivationError(HasherError):
    pass


@dataclass(frozen=True)
class HashParameters:
    """
    Argon2id cost parameters.

    memory is in KiB. Raising memory or iterations makes every hash (and
    every guess) more expensive; parallelism changes the output, so it is
    part of the stored encoding like the rest.
    """

    memory: int = 64 * 1024
    iterations: int = 3
    parallelism: int = 2
    salt_length: int = 16
    key_length: int = 32


DEFAULT_PARAMETERS = HashParameters()


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii").rstrip("=")


def _b64decode(value: str) -> bytes:
    """Strict unpadded standard base64."""
    if "=" in value or len(value) % 4 == 1:
        raise InvalidEncoding("Invalid base64 segment in encoded hash")
    try:
        decoded = base64.b64decode(value + "=" * (-len(value) % 4), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidEncoding("Invalid base64 segment in encoded hash") from e
    # Reject non-canonical trailing bits
    if _b64encode(decoded) != value:
        raise InvalidEncoding("Invalid base64 segment in encoded hash")
    return decoded


def _derive(plaintext: str, salt: bytes, params: HashParameters) -> bytes:
    try:
        return hash_secret_raw(
            secret=plaintext.encode("utf-8", errors="surrogatepass"),
            salt=salt,
            time_cost=params.iterations,
            memory_cost=params.memory,
            parallelism=params.parallelism,
            hash_len=params.key_length,
            type=Type.ID,
            version=ARGON2_VERSION,
        )
    except (HashingError, OverflowError) as e:
        raise DerivationError(f"Argon2id derivation failed: {e}") from e


def decode(encoded_hash: str) -> tuple[HashParameters, bytes, bytes]:
    """
    Split an encoded hash into its parameters, salt and derived key.

    salt_length and key_length are taken from the decoded bytes; the string
    only carries memory, iterations and parallelism.
    """
    fields = encoded_hash.split("$")
    if len(fields) != 6 or fields[0] != "" or fields[1] != ALGORITHM_TAG:
        raise InvalidHashFormat("The encoded hash is not in the correct format")

    version_match = _VERSION_RE.fullmatch(fields[2])
    if not version_match:
        raise InvalidHashFormat("The encoded hash is not in the correct format")
    if int(version_match.group(1)) != ARGON2_VERSION:
        raise UnsupportedVersion(f"Incompatible version of argon2: {version_match.group(1)}")

    params_match = _PARAMS_RE.fullmatch(fields[3])
    if not params_match:
        raise MalformedParameters("Could not parse argon2 parameters")
    memory, iterations, parallelism = (int(g) for g in params_match.groups())
    if memory > MAX_UINT32 or iterations > MAX_UINT32 or parallelism > MAX_PARALLELISM:
        raise MalformedParameters("Argon2 parameters out of range")

    salt = _b64decode(fields[4])
    key = _b64decode(fields[5])

    params = HashParameters(
        memory=memory,
        iterations=iterations,
        parallelism=parallelism,
        salt_length=len(salt),
        key_length=len(key),
    )
    return params, salt, key


class Hasher:
    """Hashes and verifies passwords with fixed Argon2id parameters."""

    def __init__(self, parameters: HashParameters = DEFAULT_PARAMETERS):
        self.parameters = parameters

    def hash(self, plaintext: str) -> str:
        """Hash a plaintext with a fresh random salt."""
        if not plaintext:
            raise ValueError("Cannot hash an empty secret")

        params = self.parameters
        try:
            salt = secrets.token_bytes(params.salt_length)
        except (OSError, NotImplementedError) as e:
            raise RandomSourceError("Secure random source unavailable") from e

        key = _derive(plaintext, salt, params)

        return (
            f"${ALGORITHM_TAG}$v={ARGON2_VERSION}"
            f"$m={params.memory},t={params.iterations},p={params.parallelism}"
            f"${_b64encode(salt)}${_b64encode(key)}"
        )

    def compare(self, plaintext: str, encoded_hash: str) -> bool:
        """
        Check a plaintext against a stored encoded hash.

        Uses the parameters stored in the hash, not this hasher's own.
        Returns False on mismatch; raises HasherError subclasses when the
        stored hash cannot be parsed.
        """
        params, salt, key = decode(encoded_hash)
        candidate = _derive(plaintext, salt, params)
        return hmac.compare_digest(candidate, key)

    @cached_property
    def dummy_hash(self) -> str:
        """A hash of a random secret, for spending the same Argon2 work on unknown users."""
        return self.hash(secrets.token_urlsafe(16))
