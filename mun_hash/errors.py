from __future__ import annotations


class MunHashError(Exception):
    """Base class for every failure raised by mun_hash."""


class ValidationError(MunHashError):
    """A catalog row does not satisfy the record invariants."""


class InvalidParameter(MunHashError, ValueError):
    pass


class EncodingError(MunHashError):
    pass


class CatalogError(MunHashError):
    pass


class DerivationFailure(MunHashError):
    def __init__(self, region: str, ibge: str | None, reason: str) -> None:
        self.region = region
        self.ibge = ibge
        self.reason = reason
        where = f"region {region}" if ibge is None else f"region {region}, ibge {ibge}"
        super().__init__(f"hash derivation failed ({where}): {reason}")


class IOFailure(MunHashError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"could not write {path}: {reason}")
