"""Lookups for users and menu items."""
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import MenuItem, User


class CatalogPersistenceService:
    """Read-only access to records maintained by administrative flows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_menu_item(self, item_id: int) -> Optional[MenuItem]:
        """Get menu item by ID."""
        return await self.db.get(MenuItem, item_id)

    async def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        return await self.db.get(User, user_id)
