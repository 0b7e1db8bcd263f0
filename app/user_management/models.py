"""
User management models and data structures.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

DISPLAY_NAME_MAX_LENGTH = 80


@dataclass
class ProfileUpdate:
    """Editable profile fields submitted by the user.

    Fields that are absent or of the wrong type are left as None and are
    not written.
    """
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    marketing_opt_in: Optional[bool] = None
    timezone: Optional[str] = None
    locale: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ProfileUpdate":
        """Build an update from a JSON body, ignoring mistyped fields."""
        if not isinstance(payload, dict):
            return cls()

        def str_field(name: str) -> Optional[str]:
            value = payload.get(name)
            return value if isinstance(value, str) else None

        display_name = str_field("display_name")
        if display_name is not None:
            display_name = display_name[:DISPLAY_NAME_MAX_LENGTH]

        opt_in = payload.get("marketing_opt_in")

        return cls(
            display_name=display_name,
            avatar_url=str_field("avatar_url"),
            marketing_opt_in=opt_in if isinstance(opt_in, bool) else None,
            timezone=str_field("timezone"),
            locale=str_field("locale"),
        )

    def changes(self) -> Dict[str, Any]:
        """Fields to write, skipping the ones not provided."""
        return {k: v for k, v in self.__dict__.items() if v is not None}

    def is_empty(self) -> bool:
        return not self.changes()
