"""PathSegment frozen dataclass."""

import re
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Static:  ``/users``  (is_param=False)
    Param:   ``/{id}``   (is_param=True, param_name="id")
    Typed:   ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"
    regex: re.Pattern[str] | None = None

    @property
    def consumes_rest(self) -> bool:
        return self.is_param and self.param_type == "path"
