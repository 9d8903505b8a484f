from typing import Protocol


class Notifier(Protocol):
    """Outbound messaging used by the login and invitation flows.

    Both methods return True when the message was handed off (or deliberately
    skipped in dev mode) and False when delivery failed.
    """

    async def send_code(self, phone: str, code: str) -> bool: ...

    async def send_invite(self, phone: str, role: str, inviter_name: str | None) -> bool: ...
