from enum import Enum
from typing import Hashable, Tuple, Union


class Sentinel(Enum):
    """Reserved markers bounding every training sequence."""

    START = "start"
    END = "end"

    def __repr__(self) -> str:
        return f"<{self.name}>"


START = Sentinel.START
END = Sentinel.END

# Tokens are any hashable value; sentinels only ever appear inside the table.
Token = Hashable
State = Union[Token, Sentinel]
Context = Tuple[State, ...]
