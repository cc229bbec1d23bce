"""Allow-list of Telegram user ids permitted to use the bot."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import structlog

logger = structlog.stdlib.get_logger()


def parse_allowed_users(lines: Iterable[str]) -> set[int]:
    """Parse one integer id per line.

    Blank lines and ``#`` comments are ignored; anything else that is not an
    integer is skipped with a warning.
    """
    ids: set[int] = set()
    for row, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            ids.add(int(line))
        except ValueError:
            logger.warning("allowed_users_bad_line", line=line, row=row)
    return ids


class AllowList:
    """Immutable set of authorised user ids, loaded once at startup."""

    def __init__(self, user_ids: Iterable[int] = ()) -> None:
        self._ids = frozenset(user_ids)

    @classmethod
    def from_file(cls, path: str | Path) -> AllowList:
        """Load ids from *path*; a missing file yields an empty allow-list."""
        path = Path(path)
        try:
            content = path.read_text()
        except FileNotFoundError:
            logger.warning("allowed_users_file_missing", path=str(path))
            return cls()
        allow = cls(parse_allowed_users(content.splitlines()))
        logger.info("allowed_users_loaded", count=len(allow), path=str(path))
        return allow

    def is_authorized(self, user_id: int) -> bool:
        return user_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._ids
