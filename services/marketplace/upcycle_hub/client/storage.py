import json
import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)


class UserCache:
    """JSON file mirroring the signed-in user between runs"""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> Optional[dict]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable user cache {self.path}: {e}")
            return None

    def save(self, user: dict) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(user, f)

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
