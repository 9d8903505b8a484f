"""Role grants and the single authority that answers "may this account act here?"."""

from collections.abc import Callable, Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.backoffice.core.exceptions import (
    Conflict,
    Forbidden,
    IdentityError,
    InvalidScope,
    NotFound,
)
from src.backoffice.core.logging import get_logger
from src.backoffice.models import Account, RoleGrant, RoleLevel, Scope, utc_now
from src.backoffice.repositories import AccountRepository, RoleGrantRepository
from src.backoffice.services.delegation import (
    can_delegate,
    ensure_can_delegate,
    validate_scope_for_role,
)

logger = get_logger(__name__)


class RoleAuthority:
    """Grant store operations and scoped role checks.

    Every authorization decision in the service goes through ``has_grant`` or
    ``ensure_can_delegate_at``; endpoints never compare roles themselves.
    """

    def __init__(
        self,
        grant_repo: RoleGrantRepository,
        account_repo: AccountRepository,
        session: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.grant_repo = grant_repo
        self.account_repo = account_repo
        self.session = session
        self.clock = clock

    # --- Checks ---

    async def roles_at(self, account: Account, scope: Scope) -> set[RoleLevel]:
        """Roles the account holds at ``scope``.

        An empty scope asks for roles held anywhere. Superusers always hold
        SUPERADMIN.
        """
        if not account.is_active:
            return set()

        roles = {RoleLevel.SUPERADMIN} if account.is_superuser else set()
        for grant in await self.grant_repo.list_active_for_account(account.id):
            if scope.is_global or grant.scope.covers(scope):
                roles.add(grant.role_level)
        return roles

    async def has_grant(
        self, account: Account, allowed_roles: Iterable[RoleLevel], scope: Scope
    ) -> bool:
        """True if the account may act at ``scope`` with any of ``allowed_roles``.

        The allowed set is chosen by the caller; role levels are never compared
        by rank here.
        """
        if not account.is_active:
            return False
        if account.is_superuser:
            return True
        return bool(await self.roles_at(account, scope) & set(allowed_roles))

    async def ensure_grant(
        self, account: Account, allowed_roles: Iterable[RoleLevel], scope: Scope
    ) -> None:
        if not await self.has_grant(account, allowed_roles, scope):
            raise Forbidden("Insufficient role for this shop or warehouse")

    async def ensure_may_delegate(self, account: Account, target_role: RoleLevel) -> None:
        """Require some held role that may hand out ``target_role`` anywhere."""
        ensure_can_delegate(await self.roles_at(account, Scope()), target_role)

    async def ensure_can_delegate_at(
        self, account: Account, target_role: RoleLevel, scope: Scope
    ) -> None:
        """Require a role that may hand out ``target_role``, held at ``scope``.

        Raises:
            Forbidden: No held role may delegate ``target_role`` at all, or none
                of the delegating roles covers ``scope``.
        """
        await self.ensure_may_delegate(account, target_role)
        held_here = await self.roles_at(account, scope)
        if not any(can_delegate(role, target_role) for role in held_here):
            raise Forbidden("No authority over this shop or warehouse")

    # --- Grant store ---

    async def stage_grant(
        self,
        account_id: UUID,
        role: RoleLevel,
        scope: Scope,
        granted_by_id: UUID | None = None,
    ) -> RoleGrant:
        """Insert a grant inside the caller's transaction (flush, no commit).

        Raises:
            InvalidScope: Scope shape does not fit the role.
            Conflict: An active grant for the exact tuple exists.
        """
        validate_scope_for_role(role, scope)

        if await self.grant_repo.get_active(account_id, role.value, scope) is not None:
            raise Conflict("Account already holds this role here")

        grant = RoleGrant(
            account_id=account_id,
            role=role.value,
            shop_id=scope.shop_id,
            warehouse_id=scope.warehouse_id,
            scope_key=scope.key,
            granted_by_id=granted_by_id,
            created_at=self.clock(),
        )
        self.grant_repo.add(grant)
        try:
            await self.session.flush()
        except IntegrityError as e:
            # Lost a race against a concurrent grant of the same tuple
            raise Conflict("Account already holds this role here") from e
        return grant

    async def create_grant(
        self,
        account_id: UUID,
        role: RoleLevel,
        scope: Scope,
        granted_by_id: UUID | None = None,
    ) -> RoleGrant:
        """Create and commit a grant."""
        try:
            grant = await self.stage_grant(account_id, role, scope, granted_by_id)
            await self.session.commit()
        except IdentityError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to create role grant", error=str(e))
            raise

        logger.info(
            "Role grant created",
            grant_id=str(grant.id),
            account_id=str(account_id),
            role=role.value,
            scope=scope.key,
        )
        return grant

    async def grant_role(
        self, actor: Account, account_id: UUID, role: RoleLevel, scope: Scope
    ) -> RoleGrant:
        """Administrative grant, subject to the same delegation rules as invites."""
        if not actor.is_superuser:
            await self.ensure_may_delegate(actor, role)
        validate_scope_for_role(role, scope)
        if not actor.is_superuser:
            await self.ensure_can_delegate_at(actor, role, scope)

        target = await self.account_repo.get_by_id(account_id)
        if target is None or not target.is_active:
            raise NotFound("Account not found")

        return await self.create_grant(account_id, role, scope, granted_by_id=actor.id)

    async def revoke_grant(self, grant_id: UUID, actor: Account) -> RoleGrant:
        """Deactivate a grant. Revoking an inactive grant changes nothing.

        Raises:
            NotFound: No such grant.
            Forbidden: Actor may not delegate the grant's role at its scope.
        """
        try:
            grant = await self.grant_repo.get_by_id(grant_id, for_update=True)
            if grant is None:
                raise NotFound("Role grant not found")

            if not actor.is_superuser:
                await self.ensure_can_delegate_at(actor, grant.role_level, grant.scope)

            if not grant.is_active:
                # Release the row lock without touching the grant
                await self.session.commit()
                logger.info("Role grant already inactive", grant_id=str(grant_id))
                return grant

            await self.grant_repo.deactivate(grant, self.clock())
            await self.session.commit()
        except IdentityError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to revoke role grant", grant_id=str(grant_id), error=str(e))
            raise

        logger.info(
            "Role grant revoked",
            grant_id=str(grant.id),
            account_id=str(grant.account_id),
            role=grant.role,
            revoked_by=str(actor.id),
        )
        return grant

    async def list_account_grants(self, account_id: UUID) -> list[RoleGrant]:
        return await self.grant_repo.list_active_for_account(account_id)

    async def list_scope_grants(
        self, scope: Scope, include_inactive: bool = False
    ) -> list[RoleGrant]:
        """Staff of a shop or warehouse."""
        if scope.is_global:
            raise InvalidScope("shop_id or warehouse_id is required")
        return await self.grant_repo.list_for_scope(scope, include_inactive)
