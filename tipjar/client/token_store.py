import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class TokenStore:
    """Session token holder; persisted to ``path`` when given, memory otherwise."""

    def __init__(self, path: Optional[str | os.PathLike] = None):
        self.path = Path(path) if path is not None else None
        self._token: Optional[str] = None

    def load(self) -> Optional[str]:
        if self._token is not None or self.path is None:
            return self._token
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        self._token = token or None
        return self._token

    def save(self, token: str) -> None:
        self._token = token
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(token, encoding="utf-8")
            os.chmod(self.path, 0o600)

    def clear(self) -> None:
        self._token = None
        if self.path is not None:
            try:
                self.path.unlink()
            except FileNotFoundError:
                pass
