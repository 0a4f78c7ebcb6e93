import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Toast:
    title: str
    description: str
    variant: str = "default"

    @property
    def destructive(self) -> bool:
        return self.variant == "destructive"


class Notifier:
    """Collects toasts and forwards them to an optional listener"""

    def __init__(self, listener: Optional[Callable[[Toast], None]] = None):
        self.listener = listener
        self.toasts: List[Toast] = []

    def notify(self, title: str, description: str, variant: str = "default") -> Toast:
        toast = Toast(title=title, description=description, variant=variant)
        self.toasts.append(toast)
        if toast.destructive:
            logger.warning(f"{title}: {description}")
        else:
            logger.info(f"{title}: {description}")
        if self.listener:
            self.listener(toast)
        return toast

    def error(self, title: str, description: str) -> Toast:
        return self.notify(title, description, variant="destructive")

    @property
    def last(self) -> Optional[Toast]:
        return self.toasts[-1] if self.toasts else None
