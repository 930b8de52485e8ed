from __future__ import annotations


def parse_admin_ids(raw: str) -> frozenset[str]:
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


class AdminAllowList:
    """Discord ids allowed into the admin API, fixed at startup."""

    def __init__(self, ids: frozenset[str]) -> None:
        self._ids = ids

    @classmethod
    def from_setting(cls, raw: str) -> "AdminAllowList":
        return cls(parse_admin_ids(raw))

    def __len__(self) -> int:
        return len(self._ids)

    def is_admin(self, discord_id: str | None) -> bool:
        if not discord_id:
            return False
        return discord_id in self._ids
