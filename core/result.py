"""
Tagged Results

Ok / Err values for callers that prefer explicit outcomes over exceptions,
e.g. the CLI. Only ArchitectError is captured; anything else propagates.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar, Union

from core.errors import ArchitectError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome"""
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the architect error"""
    error: ArchitectError

    @property
    def ok(self) -> bool:
        return False

    @property
    def code(self) -> str:
        return self.error.code

    def unwrap(self):
        raise self.error


Result = Union[Ok[T], Err]


def capture(func: Callable[..., T], *args, **kwargs) -> "Result[T]":
    """
    Call a function and tag its outcome

    Args:
        func: Function to call
        *args, **kwargs: Function arguments

    Returns:
        Ok with the return value, or Err with the raised ArchitectError
    """
    try:
        return Ok(func(*args, **kwargs))
    except ArchitectError as e:
        return Err(e)


async def capture_async(func: Callable[..., Awaitable[T]], *args, **kwargs) -> "Result[T]":
    """Async variant of capture()"""
    try:
        return Ok(await func(*args, **kwargs))
    except ArchitectError as e:
        return Err(e)


async def collect_events(stream) -> "Result[list]":
    """
    Drain an event stream into a list

    Args:
        stream: Async iterator of build events

    Returns:
        Ok with every event, or Err if the stream raised an ArchitectError
    """
    events: list = []
    try:
        async for event in stream:
            events.append(event)
    except ArchitectError as e:
        return Err(e)
    return Ok(events)
