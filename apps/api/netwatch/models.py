from datetime import datetime, timezone
from typing import List, Optional

from sqlmodel import SQLModel, Field, Relationship

from .types import CatalogItem, CountryAvailability


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SavedItem(SQLModel, table=True):
    __tablename__ = "saved_items"
    id: Optional[int] = Field(default=None, primary_key=True)
    item_id: str = Field(index=True, unique=True)
    title: str = ""
    synopsis: str = ""
    img: str = ""
    created_at: datetime = Field(default_factory=_utcnow)

    availability: List["SavedAvailability"] = Relationship(
        back_populates="saved_item",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    def to_catalog_item(self) -> CatalogItem:
        availability = tuple(
            CountryAvailability(
                country_code=a.country_code,
                country=a.country,
                audio=a.audio,
                subtitle=a.subtitle,
            )
            for a in self.availability
        )
        return CatalogItem(
            item_id=self.item_id,
            title=self.title,
            img=self.img,
            synopsis=self.synopsis,
            availability=availability or None,
            is_saved_item=True,
        )


class SavedAvailability(SQLModel, table=True):
    __tablename__ = "saved_availability"
    id: Optional[int] = Field(default=None, primary_key=True)
    saved_item_id: int = Field(foreign_key="saved_items.id", index=True)
    country_code: str = ""
    country: str = ""
    audio: str = ""
    subtitle: str = ""

    saved_item: Optional[SavedItem] = Relationship(back_populates="availability")


class Preference(SQLModel, table=True):
    __tablename__ = "preferences"
    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(default_factory=_utcnow)
