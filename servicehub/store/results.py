"""Typed outcome of a stored procedure call"""

from dataclasses import dataclass, field
from typing import Any, Optional

from ..errors import ERRORS_BY_CODE, StoreFailure, ValidationFailed


@dataclass(frozen=True)
class ProcedureResult:
    ok: bool
    message: str
    code: Optional[str] = None
    data: dict = field(default_factory=dict)

    @classmethod
    def success(cls, message: str, **data: Any) -> "ProcedureResult":
        return cls(ok=True, message=message, data=data)

    @classmethod
    def failure(cls, message: str, code: str = ValidationFailed.code) -> "ProcedureResult":
        return cls(ok=False, message=message, code=code)

    def raise_for_error(self) -> "ProcedureResult":
        """Raise the matching ServiceError for a failed result, else return self"""
        if self.ok:
            return self
        error_cls = ERRORS_BY_CODE.get(self.code or "", StoreFailure)
        if error_cls is StoreFailure:
            raise StoreFailure()
        raise error_cls(self.message)
