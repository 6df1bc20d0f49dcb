"""Data models for the Walmart deal scanner."""

from typing import Optional

from pydantic import BaseModel, Field


class Product(BaseModel):
    """A search result priced under the threshold."""

    name: str = Field(..., min_length=1, description="Product title")
    price: str = Field(..., description="Display price, e.g. $1.99")
    url: str = Field(..., min_length=1, description="Absolute product page URL")
    image_url: Optional[str] = Field(None, description="Absolute image URL if known")

    def __str__(self) -> str:
        """String representation of the product."""
        return f"{self.name}: {self.price}"


class EmailSettings(BaseModel):
    """Credentials and transport for the digest email."""

    user: str = Field(..., min_length=1, description="Sender Gmail address")
    password: str = Field(..., min_length=1, description="Gmail app password")
    recipient: str = Field(..., min_length=1, description="Destination address")
    smtp_server: str = Field("smtp.gmail.com", description="SMTP host")
    smtp_port: int = Field(587, description="SMTP port (STARTTLS)")
