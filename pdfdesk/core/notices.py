"""
User-facing notices produced by core operations.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable


class NoticeLevel(Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A dismissable message for the user."""
    title: str
    description: str
    level: NoticeLevel = NoticeLevel.INFO

    @property
    def is_error(self) -> bool:
        return self.level is NoticeLevel.ERROR


NoticeCallback = Callable[[Notice], None]


def ignore_notice(notice: Notice) -> None:
    """Default callback for code running without a UI."""
