"""Tests for role grants and scoped role checks."""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.backoffice.core.exceptions import Conflict, Forbidden, InvalidScope, NotFound
from src.backoffice.models import RoleLevel, Scope
from src.backoffice.services import RoleAuthority
from tests.helpers import create_account, create_grant, create_staff, create_superuser

pytestmark = pytest.mark.integration

SHOP = uuid4()
OTHER_SHOP = uuid4()
W1 = uuid4()
W2 = uuid4()

CASHIER = RoleLevel.CASHIER
MANAGER = RoleLevel.MANAGER
OWNER = RoleLevel.OWNER


class TestHasGrant:
    async def test_warehouse_manager_is_denied_at_another_warehouse(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        manager, _ = await create_staff(db_session, MANAGER, Scope(shop_id=SHOP, warehouse_id=W1))
        await db_session.commit()

        assert await authority.has_grant(manager, {MANAGER}, Scope(SHOP, W1)) is True
        assert await authority.has_grant(manager, {MANAGER}, Scope(SHOP, W2)) is False
        assert await authority.has_grant(manager, {MANAGER}, Scope(warehouse_id=W2)) is False

    async def test_shop_bound_grant_needs_the_shop_in_the_request(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        manager, _ = await create_staff(db_session, MANAGER, Scope(SHOP, W1))
        await db_session.commit()

        assert await authority.has_grant(manager, {MANAGER}, Scope(warehouse_id=W1)) is False
        assert await authority.has_grant(manager, {MANAGER}, Scope(OTHER_SHOP, W1)) is False

    async def test_shop_grant_covers_its_warehouses(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        owner, _ = await create_staff(db_session, OWNER, Scope(shop_id=SHOP))
        await db_session.commit()

        assert await authority.has_grant(owner, {OWNER}, Scope(shop_id=SHOP)) is True
        assert (
            await authority.has_grant(owner, {OWNER}, Scope(shop_id=SHOP, warehouse_id=W1))
            is True
        )
        assert await authority.has_grant(owner, {OWNER}, Scope(shop_id=OTHER_SHOP)) is False

    async def test_role_must_be_in_allowed_set(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        owner, _ = await create_staff(db_session, OWNER, Scope(shop_id=SHOP))
        await db_session.commit()

        # No implicit hierarchy: an owner is not a cashier
        assert await authority.has_grant(owner, {CASHIER}, Scope(shop_id=SHOP)) is False

    async def test_superuser_passes_everywhere(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        superuser = await create_superuser(db_session)
        await db_session.commit()

        assert await authority.has_grant(superuser, {CASHIER}, Scope(shop_id=SHOP)) is True
        assert await authority.has_grant(superuser, set(), Scope()) is True

    async def test_inactive_account_holds_nothing(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        account, _ = await create_staff(
            db_session, OWNER, Scope(shop_id=SHOP), is_active=False
        )
        await db_session.commit()

        assert await authority.has_grant(account, {OWNER}, Scope(shop_id=SHOP)) is False
        assert await authority.roles_at(account, Scope()) == set()

    async def test_revoked_grant_no_longer_counts(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        account = await create_account(db_session)
        await create_grant(db_session, account, OWNER, Scope(shop_id=SHOP), is_active=False)
        await db_session.commit()

        assert await authority.has_grant(account, {OWNER}, Scope(shop_id=SHOP)) is False


class TestRolesAt:
    async def test_global_scope_lists_roles_held_anywhere(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        account, _ = await create_staff(db_session, OWNER, Scope(shop_id=SHOP))
        await create_grant(db_session, account, CASHIER, Scope(warehouse_id=W2))
        await db_session.commit()

        assert await authority.roles_at(account, Scope()) == {OWNER, CASHIER}
        assert await authority.roles_at(account, Scope(shop_id=SHOP)) == {OWNER}

    async def test_superuser_holds_superadmin(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        superuser = await create_superuser(db_session)
        await db_session.commit()

        assert await authority.roles_at(superuser, Scope()) == {RoleLevel.SUPERADMIN}


class TestCreateGrant:
    async def test_creates_active_grant(self, authority: RoleAuthority, db_session: AsyncSession):
        account = await create_account(db_session)
        await db_session.commit()

        grant = await authority.create_grant(account.id, CASHIER, Scope(shop_id=SHOP))

        assert grant.is_active is True
        assert grant.scope == Scope(shop_id=SHOP)
        assert grant.scope_key == f"{SHOP}/*"

    async def test_duplicate_active_grant_conflicts(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        account = await create_account(db_session)
        await db_session.commit()
        account_id = account.id
        await authority.create_grant(account_id, CASHIER, Scope(shop_id=SHOP))

        with pytest.raises(Conflict):
            await authority.create_grant(account_id, CASHIER, Scope(shop_id=SHOP))

    async def test_same_role_at_other_scope_is_allowed(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        account = await create_account(db_session)
        await db_session.commit()

        await authority.create_grant(account.id, CASHIER, Scope(shop_id=SHOP))
        other = await authority.create_grant(account.id, CASHIER, Scope(shop_id=OTHER_SHOP))

        assert other.is_active is True

    async def test_regrant_after_revoke_creates_new_row(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        superuser = await create_superuser(db_session)
        account = await create_account(db_session)
        await db_session.commit()

        first = await authority.create_grant(account.id, CASHIER, Scope(shop_id=SHOP))
        await authority.revoke_grant(first.id, superuser)
        second = await authority.create_grant(account.id, CASHIER, Scope(shop_id=SHOP))

        assert second.id != first.id
        assert first.is_active is False
        assert second.is_active is True

    @pytest.mark.parametrize(
        ("role", "scope"),
        [
            (OWNER, Scope(shop_id=SHOP, warehouse_id=W1)),
            (OWNER, Scope(warehouse_id=W1)),
            (CASHIER, Scope()),
            (RoleLevel.SUPERADMIN, Scope(shop_id=SHOP)),
        ],
    )
    async def test_scope_shape_must_fit_role(
        self, authority: RoleAuthority, db_session: AsyncSession, role: RoleLevel, scope: Scope
    ):
        account = await create_account(db_session)
        await db_session.commit()

        with pytest.raises(InvalidScope):
            await authority.create_grant(account.id, role, scope)


class TestGrantRole:
    async def test_owner_grants_cashier_in_own_shop(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        owner, _ = await create_staff(db_session, OWNER, Scope(shop_id=SHOP))
        target = await create_account(db_session)
        await db_session.commit()

        grant = await authority.grant_role(
            owner, target.id, CASHIER, Scope(shop_id=SHOP, warehouse_id=W1)
        )

        assert grant.account_id == target.id
        assert grant.granted_by_id == owner.id

    async def test_owner_cannot_grant_in_foreign_shop(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        owner, _ = await create_staff(db_session, OWNER, Scope(shop_id=SHOP))
        target = await create_account(db_session)
        await db_session.commit()

        with pytest.raises(Forbidden):
            await authority.grant_role(owner, target.id, CASHIER, Scope(shop_id=OTHER_SHOP))

    async def test_manager_cannot_grant_owner(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        manager, _ = await create_staff(db_session, MANAGER, Scope(shop_id=SHOP))
        target = await create_account(db_session)
        await db_session.commit()

        with pytest.raises(Forbidden):
            await authority.grant_role(manager, target.id, OWNER, Scope(shop_id=SHOP))

    async def test_grant_in_own_shop_does_not_reach_foreign_warehouse(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        foreign = uuid4()
        owner, _ = await create_staff(db_session, OWNER, Scope(shop_id=SHOP))
        await create_staff(db_session, MANAGER, Scope(OTHER_SHOP, foreign))
        accomplice = await create_account(db_session)
        await db_session.commit()

        await authority.grant_role(owner, accomplice.id, MANAGER, Scope(SHOP, foreign))

        allowed = {OWNER, MANAGER}
        assert await authority.has_grant(owner, allowed, Scope(warehouse_id=foreign)) is False
        for scope in (
            Scope(warehouse_id=foreign),
            Scope(OTHER_SHOP, foreign),
            Scope(shop_id=OTHER_SHOP),
        ):
            assert await authority.has_grant(accomplice, allowed, scope) is False

    async def test_warehouse_manager_asking_for_owner_is_forbidden(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        manager, _ = await create_staff(db_session, MANAGER, Scope(SHOP, W1))
        target = await create_account(db_session)
        await db_session.commit()

        # The delegation table is consulted before the owner scope shape
        with pytest.raises(Forbidden):
            await authority.grant_role(manager, target.id, OWNER, Scope(SHOP, W1))
        with pytest.raises(Forbidden):
            await authority.grant_role(manager, target.id, RoleLevel.SUPERADMIN, Scope())

    async def test_superuser_grants_owner(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        superuser = await create_superuser(db_session)
        target = await create_account(db_session)
        await db_session.commit()

        grant = await authority.grant_role(superuser, target.id, OWNER, Scope(shop_id=SHOP))

        assert grant.role_level is OWNER

    async def test_unknown_target_account(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        superuser = await create_superuser(db_session)
        await db_session.commit()

        with pytest.raises(NotFound):
            await authority.grant_role(superuser, uuid4(), OWNER, Scope(shop_id=SHOP))


class TestRevokeGrant:
    async def test_owner_revokes_cashier(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        owner, _ = await create_staff(db_session, OWNER, Scope(shop_id=SHOP))
        _, grant = await create_staff(db_session, CASHIER, Scope(shop_id=SHOP, warehouse_id=W1))
        await db_session.commit()

        revoked = await authority.revoke_grant(grant.id, owner)

        assert revoked.is_active is False
        assert revoked.deactivated_at is not None

    async def test_revoking_inactive_grant_is_a_no_op(
        self, authority: RoleAuthority, db_session: AsyncSession, clock
    ):
        superuser = await create_superuser(db_session)
        _, grant = await create_staff(db_session, CASHIER, Scope(shop_id=SHOP))
        await db_session.commit()

        first = await authority.revoke_grant(grant.id, superuser)
        deactivated_at = first.deactivated_at
        clock.advance(minutes=5)
        second = await authority.revoke_grant(grant.id, superuser)

        assert second.is_active is False
        assert second.deactivated_at == deactivated_at

    async def test_non_delegator_cannot_revoke(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        cashier, _ = await create_staff(db_session, CASHIER, Scope(shop_id=SHOP))
        _, grant = await create_staff(db_session, CASHIER, Scope(shop_id=SHOP))
        await db_session.commit()
        grant_id = grant.id

        with pytest.raises(Forbidden):
            await authority.revoke_grant(grant_id, cashier)

        grants = await authority.list_scope_grants(Scope(shop_id=SHOP))
        assert grant_id in {grant.id for grant in grants}

    async def test_manager_cannot_revoke_owner(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        manager, _ = await create_staff(db_session, MANAGER, Scope(shop_id=SHOP))
        _, owner_grant = await create_staff(db_session, OWNER, Scope(shop_id=SHOP))
        await db_session.commit()

        with pytest.raises(Forbidden):
            await authority.revoke_grant(owner_grant.id, manager)

    async def test_unknown_grant(self, authority: RoleAuthority, db_session: AsyncSession):
        superuser = await create_superuser(db_session)
        await db_session.commit()

        with pytest.raises(NotFound):
            await authority.revoke_grant(uuid4(), superuser)


class TestListScopeGrants:
    async def test_lists_staff_of_a_shop(
        self, authority: RoleAuthority, db_session: AsyncSession
    ):
        _, owner_grant = await create_staff(db_session, OWNER, Scope(shop_id=SHOP))
        _, cashier_grant = await create_staff(
            db_session, CASHIER, Scope(shop_id=SHOP, warehouse_id=W1)
        )
        await create_staff(db_session, OWNER, Scope(shop_id=OTHER_SHOP))
        _, revoked = await create_staff(db_session, CASHIER, Scope(shop_id=SHOP))
        revoked.is_active = False
        await db_session.commit()

        active = await authority.list_scope_grants(Scope(shop_id=SHOP))
        everything = await authority.list_scope_grants(Scope(shop_id=SHOP), include_inactive=True)

        assert {grant.id for grant in active} == {owner_grant.id, cashier_grant.id}
        assert len(everything) == 3

    async def test_scope_is_required(self, authority: RoleAuthority):
        with pytest.raises(InvalidScope):
            await authority.list_scope_grants(Scope())
