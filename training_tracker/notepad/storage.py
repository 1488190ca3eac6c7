import hashlib
import json
import logging
import os
from typing import Optional

from training_tracker.config import Config
from training_tracker.utils.resources import safe_filename

logger = logging.getLogger(__name__)

class NotepadStore:
    """Per-title JSON autosave files (``notepad_<title>``) under one directory."""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = base_dir or Config.NOTEPAD_DIR

    def path_for(self, title: str) -> str:
        # Titles can collide once sanitised, so the digest keeps them apart
        digest = hashlib.sha1(title.encode("utf-8")).hexdigest()[:8]
        return os.path.join(self.base_dir, f"notepad_{safe_filename(title)}_{digest}.json")

    def save(self, title: str, data: dict) -> None:
        os.makedirs(self.base_dir, exist_ok=True)
        with open(self.path_for(title), "w", encoding="utf-8") as f:
            json.dump(data, f)

    def load(self, title: str) -> Optional[dict]:
        path = self.path_for(title)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError):
            logger.warning("Could not load saved notepad data from %s", path, exc_info=True)
            return None

    def clear(self, title: str) -> None:
        path = self.path_for(title)
        if os.path.exists(path):
            os.remove(path)
