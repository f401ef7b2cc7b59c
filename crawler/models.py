from pydantic import BaseModel, Field
from typing import List, Optional


class ListingCard(BaseModel):
    """Raw values pulled from one `.product_pod` card, None when missing."""

    title: Optional[str] = None
    href: Optional[str] = None
    price: Optional[str] = None
    availability: Optional[str] = None
    rating: Optional[str] = None
    image_src: Optional[str] = None


class ListingPage(BaseModel):
    url: str
    cards: List[ListingCard] = Field(default_factory=list)
    has_next: bool = False


class Book(BaseModel):
    id: str = Field(..., description="Slug derived from the detail page URL")
    title: str = "Untitled"
    author: str = "Unknown"
    link: str
    price: str = ""
    availability: str = ""
    rating: str = ""  # One..Five or empty
    image: Optional[str] = None
    year: str = "Unknown"
    genres: List[str] = Field(default_factory=lambda: ["General"])

    def to_dict(self):
        return self.model_dump(exclude_none=True)
