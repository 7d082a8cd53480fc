"""Results panel and user notifications for the operator session."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional

from .summary import PanelContent

logger = logging.getLogger(__name__)

Level = Literal["info", "warning", "error"]


@dataclass(slots=True)
class Notification:
    level: Level
    message: str


@dataclass
class Notifier:
    """Collects user-facing messages; the newest one is what the operator sees."""

    history: List[Notification] = field(default_factory=list)
    max_history: int = 50

    def _push(self, level: Level, message: str) -> None:
        self.history.append(Notification(level=level, message=message))
        del self.history[: -self.max_history]

    def info(self, message: str) -> None:
        logger.info(message)
        self._push("info", message)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self._push("warning", message)

    def error(self, message: str) -> None:
        logger.error(message)
        self._push("error", message)

    @property
    def latest(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None


@dataclass
class ResultsPanel:
    visible: bool = False
    content: Optional[PanelContent] = None
    loading_message: Optional[str] = None

    def show_loading(self, message: str) -> None:
        self.visible = True
        self.loading_message = message

    def show(self, content: PanelContent) -> None:
        self.visible = True
        self.loading_message = None
        self.content = content

    def hide(self) -> None:
        self.visible = False
        self.loading_message = None
        self.content = None
