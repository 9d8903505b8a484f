"""Shop/warehouse scope of a role grant, an invite or a request."""

from dataclasses import dataclass
from uuid import UUID

_ANY = "*"


@dataclass(frozen=True)
class Scope:
    """Where a role applies.

    A grant with no shop and no warehouse applies everywhere (superadmin).
    """

    shop_id: UUID | None = None
    warehouse_id: UUID | None = None

    @property
    def is_global(self) -> bool:
        return self.shop_id is None and self.warehouse_id is None

    @property
    def key(self) -> str:
        """Stable, NULL-free form used in unique indexes."""
        shop = str(self.shop_id) if self.shop_id else _ANY
        warehouse = str(self.warehouse_id) if self.warehouse_id else _ANY
        return f"{shop}/{warehouse}"

    def covers(self, requested: "Scope") -> bool:
        """Whether a grant held at this scope applies to ``requested``.

        - a scope-free grant covers everything
        - a grant naming a shop covers only requests naming that same shop
        - a grant naming a warehouse covers only requests naming that warehouse

        A shop-only grant therefore covers every warehouse request made under
        its shop. Nothing links a warehouse id to a shop, so a request that
        omits the shop is never matched by a shop-bound grant.
        """
        if self.is_global:
            return True
        if self.shop_id is not None and requested.shop_id != self.shop_id:
            return False
        if self.warehouse_id is not None and requested.warehouse_id != self.warehouse_id:
            return False
        return True
