"""Domain entity representing a user known to the directory."""

from dataclasses import dataclass


@dataclass
class DirectoryUser:
    """Minimal view of an employee account needed to address notifications."""

    id: int
    role: str
    name: str
    email: str | None
    is_active: bool = True

    def has_role(self, role: str) -> bool:
        """Return ``True`` when the user's role matches ``role``."""

        return self.role.casefold() == role.casefold()


__all__ = ["DirectoryUser"]
