"""Typed models for catalog documents as they are stored on disk."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from catalog_manager.catalog.errors import CatalogValidationError

DEFAULT_LANGUAGE = "en_us"


class _DiskModel(BaseModel):
    # Unknown keys written by other catalog tools survive a rewrite.
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Component(_DiskModel):
    prototype_guid: int = Field(default=0, alias="PrototypeGuid")
    prototype_ref: int = Field(..., ge=0, alias="ItemPrototypeRuntimeIdForClient")
    quantity: int = Field(default=1, alias="Quantity")


class Localization(_DiskModel):
    # declaration order is the key order written to disk
    language_id: str = Field(default=DEFAULT_LANGUAGE, alias="LanguageId")
    description: str = Field(default="", alias="Description")
    title: str = Field(default="", alias="Title")
    release_date: str = Field(default="", alias="ReleaseDate")
    price: int = Field(default=0, alias="ItemPrice")


class Category(_DiskModel):
    name: str = Field(default="", alias="Name")
    order: int = Field(default=0, alias="Order")


class Modifier(_DiskModel):
    name: str = Field(..., alias="Name")
    order: int = Field(default=0, alias="Order")


class CatalogItem(_DiskModel):
    """A single unit of sale."""

    sku_id: int = Field(..., ge=0, alias="SkuId")
    primary_components: List[Component] = Field(default_factory=list, alias="GuidItems")
    bonus_components: List[Component] = Field(default_factory=list, alias="AdditionalGuidItems")
    localizations: List[Localization] = Field(default_factory=list, alias="LocalizedEntries")
    info_links: List[Dict[str, Any]] = Field(default_factory=list, alias="InfoUrls")
    content_assets: List[Dict[str, Any]] = Field(default_factory=list, alias="ContentData")
    category: Category = Field(default_factory=Category, alias="Type")
    modifiers: List[Modifier] = Field(default_factory=list, alias="TypeModifiers")

    @property
    def canonical(self) -> Localization | None:
        """Return the default locale entry used for display and sorting."""

        if not self.localizations:
            return None
        return self.localizations[0]

    @property
    def title(self) -> str:
        canonical = self.canonical
        return canonical.title if canonical else ""

    @property
    def price(self) -> int | None:
        canonical = self.canonical
        return canonical.price if canonical else None

    @property
    def modifier_names(self) -> list[str]:
        return [modifier.name for modifier in self.modifiers]

    @property
    def prototype_refs(self) -> list[int]:
        return [c.prototype_ref for c in (*self.primary_components, *self.bonus_components)]

    def to_disk(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class CatalogDocument(_DiskModel):
    """Top-level object of the base catalog file."""

    timestamp_seconds: int = Field(default=0, alias="TimestampSeconds")
    timestamp_microseconds: int = Field(default=0, alias="TimestampMicroseconds")
    entries: List[CatalogItem] = Field(default_factory=list, alias="Entries")
    url_sets: List[Any] = Field(default_factory=list, alias="UrlSets")
    client_must_download_images: bool = Field(default=False, alias="ClientMustDownloadImages")

    def index_of(self, sku_id: int) -> int:
        for position, entry in enumerate(self.entries):
            if entry.sku_id == sku_id:
                return position
        return -1

    def to_disk(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


PATCH_ADAPTER: TypeAdapter[List[CatalogItem]] = TypeAdapter(List[CatalogItem])


def dump_items(items: Iterable[CatalogItem]) -> list[dict[str, Any]]:
    return [item.to_disk() for item in items]


def replace_modifiers(item: CatalogItem, modifiers: Iterable[Modifier]) -> CatalogItem:
    """Return a copy of ``item`` carrying only the new modifier list."""

    return item.model_copy(update={"modifiers": [m.model_copy() for m in modifiers]})


def ensure_valid(item: CatalogItem) -> CatalogItem:
    """Check the fields a saved item must carry.

    The store accepts whatever it is given; editors call this before handing
    an item over so that half-filled forms never reach disk.
    """

    problems: list[str] = []
    if not item.localizations:
        problems.append("at least one localization is required")
    elif not item.localizations[0].title.strip():
        problems.append("default localization needs a title")
    if not item.primary_components:
        problems.append("at least one component is required")
    for position, component in enumerate((*item.primary_components, *item.bonus_components)):
        if component.quantity < 1:
            problems.append(f"component #{position} has quantity {component.quantity}")
    if not item.category.name.strip():
        problems.append("category name is required")
    if problems:
        raise CatalogValidationError(problems)
    return item


__all__ = [
    "DEFAULT_LANGUAGE",
    "Component",
    "Localization",
    "Category",
    "Modifier",
    "CatalogItem",
    "CatalogDocument",
    "PATCH_ADAPTER",
    "dump_items",
    "replace_modifiers",
    "ensure_valid",
]
