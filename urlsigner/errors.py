class URLSignerError(Exception):
    """Base class for everything raised by the signer."""


class ConfigurationError(URLSignerError, ValueError):
    pass


class UnsupportedAlgorithmError(ConfigurationError):
    def __init__(self, algorithm: str):
        super().__init__(f"unsupported hash algorithm: {algorithm!r}")
        self.algorithm = algorithm


class InvalidURLError(URLSignerError, ValueError):
    pass


class InvalidDurationError(URLSignerError, ValueError):
    pass
