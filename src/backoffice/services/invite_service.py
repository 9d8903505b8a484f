"""Staff invitations: PENDING until accepted, rejected or cancelled."""

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.backoffice.core.exceptions import (
    Conflict,
    Forbidden,
    IdentityError,
    InvalidScope,
    InvalidState,
    NotFound,
)
from src.backoffice.core.logging import get_logger, loggable_phone
from src.backoffice.core.notifications import Notifier
from src.backoffice.core.phone import normalize_phone
from src.backoffice.models import (
    Account,
    Invite,
    InviteStatus,
    RoleGrant,
    RoleLevel,
    Scope,
    utc_now,
)
from src.backoffice.repositories import InviteRepository, RoleGrantRepository
from src.backoffice.services.delegation import validate_scope_for_role
from src.backoffice.services.role_authority import RoleAuthority

logger = get_logger(__name__)

# Roles that may look at a scope's invites and staff
SCOPE_ADMIN_ROLES = frozenset({RoleLevel.OWNER, RoleLevel.MANAGER})


@dataclass(frozen=True)
class InviteStats:
    total: int
    by_status: dict[InviteStatus, int]
    by_role: dict[RoleLevel, int]
    average_acceptance_seconds: float | None


class InviteService:
    """Invite state machine.

    Terminal states (ACCEPTED, REJECTED, CANCELLED) never change again. Every
    transition is a conditional update on status = PENDING, so concurrent
    transitions of one invite resolve to exactly one winner.
    """

    def __init__(
        self,
        invite_repo: InviteRepository,
        grant_repo: RoleGrantRepository,
        authority: RoleAuthority,
        session: AsyncSession,
        notifier: Notifier,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.invite_repo = invite_repo
        self.grant_repo = grant_repo
        self.authority = authority
        self.session = session
        self.notifier = notifier
        self.clock = clock

    async def create_invite(
        self,
        creator: Account,
        phone: str,
        role: RoleLevel,
        scope: Scope,
        email: str | None = None,
    ) -> Invite:
        """Invite a phone to hold ``role`` at ``scope``.

        Raises:
            Forbidden: The creator may not hand out ``role`` here.
            InvalidScope: The scope does not fit the role, or names no shop.
            Conflict: A pending invite or an active grant already covers it.
        """
        try:
            await self.authority.ensure_may_delegate(creator, role)
            if scope.shop_id is None:
                raise InvalidScope("Invites require a shop")
            validate_scope_for_role(role, scope)
            await self.authority.ensure_can_delegate_at(creator, role, scope)

            phone = normalize_phone(phone)
            if await self.invite_repo.get_pending(phone, role.value, scope) is not None:
                raise Conflict("A pending invite for this phone, role and scope already exists")
            if await self.grant_repo.get_active_for_phone(phone, role.value, scope) is not None:
                raise Conflict("This phone already holds the role here")

            now = self.clock()
            invite = Invite(
                phone=phone,
                email=email,
                role=role.value,
                shop_id=scope.shop_id,
                warehouse_id=scope.warehouse_id,
                scope_key=scope.key,
                created_by_id=creator.id,
                created_at=now,
            )
            self.invite_repo.add(invite)
            try:
                await self.session.flush()
            except IntegrityError as e:
                raise Conflict(
                    "A pending invite for this phone, role and scope already exists"
                ) from e
            await self.session.commit()
        except IdentityError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to create invite", error=str(e))
            raise

        logger.info(
            "Invite created",
            invite_id=str(invite.id),
            phone=loggable_phone(phone),
            role=role.value,
            scope=scope.key,
            created_by=str(creator.id),
        )

        # Notice is best effort; the invite stands either way
        if not await self.notifier.send_invite(phone, role.value, creator.display_name):
            logger.warning("Invite notice not delivered", invite_id=str(invite.id))
        return invite

    async def accept_invite(self, invite_id: UUID, account: Account) -> tuple[Invite, RoleGrant]:
        """Accept an invite addressed to the account's phone.

        The grant and the ACCEPTED transition commit together; if either fails
        the invite stays PENDING and no grant exists.

        Raises:
            NotFound: No such invite.
            InvalidState: The invite is no longer PENDING.
            Forbidden: The invite is addressed to another phone.
            Conflict: The account already holds the role at that scope.
        """
        try:
            invite = await self.invite_repo.get_by_id(invite_id, for_update=True)
            if invite is None:
                raise NotFound("Invite not found")
            if invite.invite_status is not InviteStatus.PENDING:
                raise InvalidState(f"Invite is already {invite.status}")
            if invite.phone != account.phone:
                raise Forbidden("This invite is addressed to another phone number")

            grant = await self.authority.stage_grant(
                account.id,
                invite.role_level,
                invite.scope,
                granted_by_id=invite.created_by_id,
            )
            moved = await self.invite_repo.transition_from_pending(
                invite.id,
                InviteStatus.ACCEPTED,
                self.clock(),
                invited_account_id=account.id,
                grant_id=grant.id,
            )
            if not moved:
                raise InvalidState("Invite is no longer pending")
            await self.session.commit()
            await self.session.refresh(invite)
        except IdentityError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to accept invite", invite_id=str(invite_id), error=str(e))
            raise

        logger.info(
            "Invite accepted",
            invite_id=str(invite.id),
            account_id=str(account.id),
            grant_id=str(grant.id),
        )
        return invite, grant

    async def reject_invite(self, invite_id: UUID, account: Account) -> Invite:
        """Decline an invite addressed to the account's phone."""
        try:
            invite = await self.invite_repo.get_by_id(invite_id, for_update=True)
            if invite is None:
                raise NotFound("Invite not found")
            if invite.phone != account.phone:
                raise Forbidden("This invite is addressed to another phone number")
            await self._finish(invite, InviteStatus.REJECTED, invited_account_id=account.id)
        except IdentityError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to reject invite", invite_id=str(invite_id), error=str(e))
            raise

        logger.info("Invite rejected", invite_id=str(invite.id), account_id=str(account.id))
        return invite

    async def cancel_invite(self, invite_id: UUID, actor: Account) -> Invite:
        """Withdraw an invite.

        Allowed for its creator, a superuser, or anyone who could have created
        the same invite.
        """
        try:
            invite = await self.invite_repo.get_by_id(invite_id, for_update=True)
            if invite is None:
                raise NotFound("Invite not found")
            if invite.created_by_id != actor.id and not actor.is_superuser:
                await self.authority.ensure_can_delegate_at(
                    actor, invite.role_level, invite.scope
                )
            await self._finish(invite, InviteStatus.CANCELLED)
        except IdentityError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to cancel invite", invite_id=str(invite_id), error=str(e))
            raise

        logger.info("Invite cancelled", invite_id=str(invite.id), cancelled_by=str(actor.id))
        return invite

    async def _finish(
        self,
        invite: Invite,
        status: InviteStatus,
        invited_account_id: UUID | None = None,
    ) -> None:
        if invite.invite_status is not InviteStatus.PENDING:
            raise InvalidState(f"Invite is already {invite.status}")
        moved = await self.invite_repo.transition_from_pending(
            invite.id, status, self.clock(), invited_account_id=invited_account_id
        )
        if not moved:
            raise InvalidState("Invite is no longer pending")
        await self.session.commit()
        await self.session.refresh(invite)

    async def get_invite(self, invite_id: UUID, viewer: Account) -> Invite:
        """Fetch an invite visible to ``viewer``.

        Visible to its creator, its addressee, and owners/managers of its
        scope. Anyone else gets NotFound, as if it did not exist.
        """
        invite = await self.invite_repo.get_by_id(invite_id)
        if invite is None:
            raise NotFound("Invite not found")
        if invite.created_by_id == viewer.id or invite.phone == viewer.phone:
            return invite
        if await self.authority.has_grant(viewer, SCOPE_ADMIN_ROLES, invite.scope):
            return invite
        raise NotFound("Invite not found")

    async def list_pending_for_account(self, account: Account) -> list[Invite]:
        """Pending invites addressed to the account's phone."""
        return await self.invite_repo.list_pending_for_phone(account.phone)

    async def list_scope_invites(
        self,
        scope: Scope,
        status: InviteStatus | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[Invite], str | None, bool]:
        if scope.shop_id is None:
            raise InvalidScope("shop_id is required")
        return await self.invite_repo.list_for_scope_paginated(scope, status, cursor, limit)

    async def invite_stats(self, scope: Scope) -> InviteStats:
        """Counts by status and role plus the mean time to acceptance."""
        if scope.shop_id is None:
            raise InvalidScope("shop_id is required")

        invites = await self.invite_repo.list_for_scope(scope)
        by_status = Counter(InviteStatus(invite.status) for invite in invites)
        by_role = Counter(RoleLevel(invite.role) for invite in invites)

        waits = [
            (invite.status_changed_at - invite.created_at).total_seconds()
            for invite in invites
            if invite.status == InviteStatus.ACCEPTED.value and invite.status_changed_at
        ]
        average = sum(waits) / len(waits) if waits else None

        return InviteStats(
            total=len(invites),
            by_status={status: by_status.get(status, 0) for status in InviteStatus},
            by_role=dict(by_role),
            average_acceptance_seconds=average,
        )
