from dataclasses import dataclass
from typing import Generic, Iterator, Optional, TypeVar

from vaultshare.core.errors import BackendError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a backend call: either data or a backend-reported error.

    Unpacks like the (data, error) pair callers are used to:

        data, error = await repo.get(vault_id)
    """

    data: Optional[T] = None
    error: Optional[BackendError] = None

    @classmethod
    def success(cls, data: T) -> "Result[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, error: BackendError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.data

    def __iter__(self) -> Iterator:
        yield self.data
        yield self.error
