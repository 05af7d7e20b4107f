"""Category Service — category CRUD, hierarchy listing, statistics and system seeding.

Invariants:
    - Category names are unique (409 on duplicates)
    - A referenced parent must exist (404) and can never be the category itself (400)
    - Deleting a category detaches its prompts and child categories (set to NULL)
    - Seeding is idempotent: existing names are left untouched

Design Decisions:
    - Detach done explicitly with UPDATE statements: SQLite test databases do not
      enforce ON DELETE SET NULL without a pragma
"""

import logging

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.core.commands import CreateCategoryCommand, UpdateCategoryCommand
from promptserver.core.errors import (
    DuplicateResourceError, InvalidCommandError, ResourceNotFoundError,
)
from promptserver.infrastructure.database import unique_violation_as_conflict
from promptserver.models.category import Category
from promptserver.models.prompt_template import PromptTemplate

logger = logging.getLogger(__name__)

# (name, display name, description, children[(name, display name)])
SYSTEM_CATEGORIES: tuple[tuple[str, str, str, tuple[tuple[str, str], ...]], ...] = (
    ("development", "Development", "Software development prompts", (
        ("backend", "Backend"),
        ("frontend", "Frontend"),
        ("mobile", "Mobile"),
        ("devops", "DevOps"),
    )),
    ("data", "Data", "Data analysis and engineering prompts", (
        ("data_analysis", "Data Analysis"),
        ("machine_learning", "Machine Learning"),
        ("data_engineering", "Data Engineering"),
    )),
    ("design", "Design", "Design prompts", (
        ("ux_design", "UX Design"),
        ("ui_design", "UI Design"),
        ("interaction_design", "Interaction Design"),
    )),
    ("product_management", "Product Management", "Product management prompts", (
        ("product_planning", "Product Planning"),
        ("product_analysis", "Product Analysis"),
        ("agile_methodology", "Agile Methodology"),
    )),
    ("marketing", "Marketing", "Marketing prompts", (
        ("content_marketing", "Content Marketing"),
        ("advertising", "Advertising"),
    )),
)


class CategoryService:
    """Category commands and queries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, category_id: int) -> Category:
        category = await self.db.get(Category, category_id)
        if category is None:
            raise ResourceNotFoundError("Category", str(category_id))
        return category

    async def _name_taken(self, name: str) -> bool:
        return await self.db.scalar(select(Category.id).where(Category.name == name)) is not None

    async def create(self, command: CreateCategoryCommand) -> Category:
        if await self._name_taken(command.name):
            raise DuplicateResourceError(
                "Category", f"Category name '{command.name}' already exists",
            )
        if command.parent_category_id is not None:
            await self.get(command.parent_category_id)

        category = Category(
            name=command.name,
            display_name=command.display_name,
            description=command.description,
            parent_category_id=command.parent_category_id,
            is_system=False,
        )
        self.db.add(category)
        async with unique_violation_as_conflict(
            self.db, "Category", f"Category name '{command.name}' already exists",
        ):
            await self.db.commit()
        await self.db.refresh(category)
        logger.info("Category created", extra={"category_id": category.id})
        return category

    async def update(self, command: UpdateCategoryCommand) -> Category:
        category = await self.get(command.category_id)
        if command.parent_category_id is not None:
            await self.get(command.parent_category_id)
            await self._ensure_not_descendant(category.id, command.parent_category_id)

        category.display_name = command.display_name
        category.description = command.description
        category.parent_category_id = command.parent_category_id
        await self.db.commit()
        await self.db.refresh(category)
        return category

    async def _ensure_not_descendant(self, category_id: int, parent_id: int) -> None:
        """Walk up from the new parent; reaching category_id means a cycle."""
        current: int | None = parent_id
        seen: set[int] = set()
        while current is not None and current not in seen:
            if current == category_id:
                raise InvalidCommandError(
                    "Category hierarchy cannot contain a cycle",
                    "parent_category_id", code="CIRCULAR_REFERENCE",
                )
            seen.add(current)
            current = await self.db.scalar(
                select(Category.parent_category_id).where(Category.id == current),
            )

    async def delete(self, category_id: int) -> None:
        category = await self.get(category_id)
        await self.db.execute(
            update(PromptTemplate)
            .where(PromptTemplate.category_id == category_id)
            .values(category_id=None),
        )
        await self.db.execute(
            update(Category)
            .where(Category.parent_category_id == category_id)
            .values(parent_category_id=None),
        )
        await self.db.delete(category)
        await self.db.commit()
        logger.info("Category deleted", extra={"category_id": category_id})

    async def list_all(self) -> list[Category]:
        result = await self.db.execute(select(Category).order_by(Category.id))
        return list(result.scalars().all())

    async def list_roots(self) -> list[Category]:
        result = await self.db.execute(
            select(Category)
            .where(Category.parent_category_id.is_(None))
            .order_by(Category.id),
        )
        return list(result.scalars().all())

    async def list_subcategories(self, parent_id: int) -> list[Category]:
        await self.get(parent_id)
        result = await self.db.execute(
            select(Category)
            .where(Category.parent_category_id == parent_id)
            .order_by(Category.id),
        )
        return list(result.scalars().all())

    # ─── Statistics ──────────────────────────────────────────────

    async def root_statistics(self) -> list[tuple[Category, int]]:
        """Active prompt count per root category, children included."""
        roots = await self.list_roots()
        return [(root, await self._prompt_count_with_children(root.id)) for root in roots]

    async def child_statistics(self, root_id: int) -> list[tuple[Category, int]]:
        children = await self.list_subcategories(root_id)
        return [(child, await self._prompt_count([child.id])) for child in children]

    async def _prompt_count_with_children(self, category_id: int) -> int:
        child_ids = (await self.db.execute(
            select(Category.id).where(Category.parent_category_id == category_id),
        )).scalars().all()
        return await self._prompt_count([category_id, *child_ids])

    async def _prompt_count(self, category_ids: list[int]) -> int:
        return await self.db.scalar(
            select(func.count(PromptTemplate.id))
            .where(PromptTemplate.category_id.in_(category_ids))
            .where(PromptTemplate.deleted_at.is_(None)),
        ) or 0

    # ─── Seeding ─────────────────────────────────────────────────

    async def seed_system_categories(self) -> int:
        """Insert missing system categories. Returns the number created."""
        existing = set((await self.db.execute(select(Category.name))).scalars().all())
        created = 0
        for name, display_name, description, children in SYSTEM_CATEGORIES:
            if name in existing:
                parent_id = await self.db.scalar(
                    select(Category.id).where(Category.name == name),
                )
            else:
                parent = Category(
                    name=name, display_name=display_name,
                    description=description, is_system=True,
                )
                self.db.add(parent)
                await self.db.flush()
                parent_id = parent.id
                created += 1
            for child_name, child_display in children:
                if child_name in existing:
                    continue
                self.db.add(Category(
                    name=child_name, display_name=child_display,
                    parent_category_id=parent_id, is_system=True,
                ))
                created += 1
        await self.db.commit()
        if created:
            logger.info(f"Seeded {created} system categories")
        return created
