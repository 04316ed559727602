import hashlib
import hmac
import logging
import re
from enum import Enum

from urlsigner.canonical import append_query_params, canonicalize, parse_query, split_url
from urlsigner.config import Settings
from urlsigner.durations import Clock, Validity, parse_duration, resolve_expiry, utc_now
from urlsigner.errors import ConfigurationError, InvalidURLError, UnsupportedAlgorithmError

logger = logging.getLogger(__name__)

EXPIRES_PARAM = "expires"
SIGNATURE_PARAM = "signature"
RESERVED_PARAMS = frozenset({EXPIRES_PARAM, SIGNATURE_PARAM})

DEFAULT_VALIDITY = "5 HOURS"

# unix seconds; longer values cannot be a real expiry
_DECIMAL = re.compile(r"[0-9]{1,20}")


class HashAlgorithm(str, Enum):
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"
    SHA3_256 = "sha3_256"
    SHA3_384 = "sha3_384"
    SHA3_512 = "sha3_512"
    BLAKE2B = "blake2b"
    BLAKE2S = "blake2s"

    @classmethod
    def parse(cls, value: "HashAlgorithm | str") -> "HashAlgorithm":
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        # accept "SHA-256" and "sha3-256" spellings
        candidates = (name, name.replace("-", "_"), name.replace("-", ""))
        known = {member.value for member in cls}
        algorithm = next((cls(c) for c in candidates if c in known), None)
        if algorithm is None:
            raise UnsupportedAlgorithmError(str(value))
        if algorithm.value not in hashlib.algorithms_available:
            raise UnsupportedAlgorithmError(algorithm.value)
        return algorithm


class URLSigner:
    """Signs URLs with an expiry and verifies them.

    The MAC input is ``"<expires>::<canonical url>::<key>"`` keyed with the
    same secret. Instances hold only immutable configuration and can be
    shared between threads.
    """

    __slots__ = ("_key", "_algorithm", "_default_validity", "_clock")

    def __init__(
        self,
        secret_key: str | bytes,
        algorithm: HashAlgorithm | str = HashAlgorithm.SHA256,
        default_validity: Validity = DEFAULT_VALIDITY,
        clock: Clock | None = None,
    ):
        if isinstance(secret_key, str):
            secret_key = secret_key.encode("utf-8")
        if not isinstance(secret_key, bytes) or not secret_key:
            raise ConfigurationError("secret key must be a non-empty string")
        # fail at construction rather than on the first sign() call
        parse_duration(default_validity)

        object.__setattr__(self, "_key", secret_key)
        object.__setattr__(self, "_algorithm", HashAlgorithm.parse(algorithm))
        object.__setattr__(self, "_default_validity", default_validity)
        object.__setattr__(self, "_clock", clock or utc_now)

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock | None = None) -> "URLSigner":
        return cls(
            settings.secret_key.get_secret_value(),
            algorithm=settings.hash_algorithm,
            default_validity=settings.default_validity,
            clock=clock,
        )

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self) -> str:
        return f"URLSigner(algorithm={self._algorithm.value!r}, secret_key='**********')"

    @property
    def algorithm(self) -> HashAlgorithm:
        return self._algorithm

    @property
    def default_validity(self) -> Validity:
        return self._default_validity

    def now(self) -> int:
        return int(self._clock())

    def signature_for(self, url: str, expires: int | str) -> str:
        """Hex MAC for ``url`` with ``expires``, ignoring any reserved params in ``url``."""
        canonical = canonicalize(url, RESERVED_PARAMS)
        payload = f"{expires}::{canonical}::".encode("utf-8") + self._key
        return hmac.new(self._key, payload, self._algorithm.value).hexdigest()

    def sign(self, url: str, validity: Validity | None = None, *, now: int | None = None) -> str:
        signed, _ = self.sign_with_expiry(url, validity, now=now)
        return signed

    def sign_with_expiry(
        self, url: str, validity: Validity | None = None, *, now: int | None = None
    ) -> tuple[str, int]:
        """Like :meth:`sign`, also returning the absolute ``expires`` timestamp."""
        if validity is None or validity == "":
            validity = self._default_validity
        current = self.now() if now is None else int(now)
        expires = resolve_expiry(validity, current)
        signature = self.signature_for(url, expires)

        signed = append_query_params(url, {EXPIRES_PARAM: str(expires), SIGNATURE_PARAM: signature})
        logger.info("signed url for %s expiring at %d", _describe(url), expires)
        return signed, expires

    def verify(self, url: str, *, now: int | None = None) -> bool:
        try:
            parts = split_url(url)
        except InvalidURLError:
            logger.debug("rejected url: unparseable")
            return False
        if not parts.query:
            logger.debug("rejected url: no query string")
            return False

        params = parse_query(parts.query)
        if not params:
            logger.debug("rejected url: empty query")
            return False

        expires = params.get(EXPIRES_PARAM, "")
        signature = params.get(SIGNATURE_PARAM, "")
        if not expires or not signature or not _DECIMAL.fullmatch(expires) or int(expires) <= 0:
            logger.debug("rejected url: missing or malformed expires/signature")
            return False

        current = self.now() if now is None else int(now)
        if int(expires) < current:
            logger.debug("rejected url: expired at %s", expires)
            return False

        expected = self.signature_for(url, expires)
        if not hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8")):
            logger.debug("rejected url: signature mismatch for %s", _describe(url))
            return False
        return True


def _describe(url: str) -> str:
    parts = split_url(url)
    return f"{parts.scheme}://{parts.authority}{parts.path}"
