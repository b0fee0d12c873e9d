from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope for every JSON route.
    Success fills `data`; HTTP errors come back with `data=None` and the detail in `error`.
    """
    data: Optional[T] = None
    error: Optional[str] = None
