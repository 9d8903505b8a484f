"""Repository for RoleGrant entity."""

from datetime import datetime
from uuid import UUID

from sqlmodel import select

from src.backoffice.models import Account, RoleGrant, Scope
from src.backoffice.repositories.base import BaseRepository


class RoleGrantRepository(BaseRepository[RoleGrant]):
    model = RoleGrant

    async def get_active(self, account_id: UUID, role: str, scope: Scope) -> RoleGrant | None:
        """Get the active grant for an exact (account, role, scope) tuple."""
        result = await self.session.execute(
            select(RoleGrant).where(
                RoleGrant.account_id == account_id,
                RoleGrant.role == role,
                RoleGrant.scope_key == scope.key,
                RoleGrant.is_active == True,  # noqa: E712
            )
        )
        return result.scalar_one_or_none()

    async def get_active_for_phone(self, phone: str, role: str, scope: Scope) -> RoleGrant | None:
        """Get the active grant for a tuple, looking the account up by phone."""
        result = await self.session.execute(
            select(RoleGrant)
            .join(Account, Account.id == RoleGrant.account_id)  # type: ignore[arg-type]
            .where(
                Account.phone == phone,
                RoleGrant.role == role,
                RoleGrant.scope_key == scope.key,
                RoleGrant.is_active == True,  # noqa: E712
            )
        )
        return result.scalar_one_or_none()

    async def list_active_for_account(self, account_id: UUID) -> list[RoleGrant]:
        result = await self.session.execute(
            select(RoleGrant)
            .where(
                RoleGrant.account_id == account_id,
                RoleGrant.is_active == True,  # noqa: E712
            )
            .order_by(RoleGrant.created_at)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())

    async def list_for_scope(self, scope: Scope, include_inactive: bool = False) -> list[RoleGrant]:
        """Grants located at a shop and/or warehouse (staff listing).

        A shop-only scope lists every grant in that shop, warehouse grants
        included.
        """
        query = select(RoleGrant)
        if scope.shop_id is not None:
            query = query.where(RoleGrant.shop_id == scope.shop_id)
        if scope.warehouse_id is not None:
            query = query.where(RoleGrant.warehouse_id == scope.warehouse_id)
        if not include_inactive:
            query = query.where(RoleGrant.is_active == True)  # noqa: E712
        result = await self.session.execute(
            query.order_by(RoleGrant.created_at)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())

    async def deactivate(self, grant: RoleGrant, now: datetime) -> RoleGrant:
        grant.is_active = False
        grant.deactivated_at = now
        self.session.add(grant)
        await self.session.flush()
        return grant
