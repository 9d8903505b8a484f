"""Repository for Invite entity."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import update
from sqlmodel import select

from src.backoffice.models import Invite, InviteStatus, Scope
from src.backoffice.repositories.base import BaseRepository


class InviteRepository(BaseRepository[Invite]):
    model = Invite

    async def get_pending(self, phone: str, role: str, scope: Scope) -> Invite | None:
        """Get the pending invite for an exact (phone, role, scope) tuple."""
        result = await self.session.execute(
            select(Invite).where(
                Invite.phone == phone,
                Invite.role == role,
                Invite.scope_key == scope.key,
                Invite.status == InviteStatus.PENDING.value,
            )
        )
        return result.scalar_one_or_none()

    async def list_pending_for_phone(self, phone: str) -> list[Invite]:
        result = await self.session.execute(
            select(Invite)
            .where(
                Invite.phone == phone,
                Invite.status == InviteStatus.PENDING.value,
            )
            .order_by(Invite.created_at.desc())  # type: ignore[attr-defined]
        )
        return list(result.scalars().all())

    def _scope_query(self, scope: Scope):  # type: ignore[no-untyped-def]
        query = select(Invite).where(Invite.shop_id == scope.shop_id)
        if scope.warehouse_id is not None:
            query = query.where(Invite.warehouse_id == scope.warehouse_id)
        return query

    async def list_for_scope_paginated(
        self,
        scope: Scope,
        status: InviteStatus | None,
        cursor: str | None,
        limit: int,
    ) -> tuple[list[Invite], str | None, bool]:
        """Invites of a shop (optionally one of its warehouses), newest first."""
        query = self._scope_query(scope)
        if status is not None:
            query = query.where(Invite.status == status.value)
        return await self.paginate_by_created_at(query, cursor, limit)

    async def list_for_scope(self, scope: Scope) -> list[Invite]:
        result = await self.session.execute(self._scope_query(scope))
        return list(result.scalars().all())

    async def transition_from_pending(
        self,
        invite_id: UUID,
        status: InviteStatus,
        now: datetime,
        invited_account_id: UUID | None = None,
        grant_id: UUID | None = None,
    ) -> bool:
        """Move a PENDING invite to ``status``.

        Conditional on the row still being PENDING, so two concurrent
        transitions cannot both succeed. Returns False when another transition
        got there first.
        """
        values: dict[str, object] = {"status": status.value, "status_changed_at": now}
        if invited_account_id is not None:
            values["invited_account_id"] = invited_account_id
        if grant_id is not None:
            values["grant_id"] = grant_id

        result = await self.session.execute(
            update(Invite)
            .where(Invite.id == invite_id)  # type: ignore[arg-type]
            .where(Invite.status == InviteStatus.PENDING.value)  # type: ignore[arg-type]
            .values(**values)
        )
        return (result.rowcount or 0) == 1  # type: ignore[attr-defined]
