from dataclasses import dataclass
from typing import Any, Callable, List


@dataclass(eq=False)
class BuiltinFunction:
    name: str
    arity: int
    fn: Callable[[List[Any]], Any]

    def __repr__(self) -> str:
        return "<native fn>"
