"""
Catalog Models

Courses students apply to and digital products sold for download.
Prices are whole BDT.
"""

import enum

from sqlalchemy import Boolean, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.modules.shared import BaseModel


class CourseType(str, enum.Enum):
    """Government-affiliated or private course."""

    GOVT = "Govt"
    PRIVATE = "Private"


class ProductType(str, enum.Enum):
    """Kinds of downloadable products."""

    PDF = "PDF"
    DOC = "Doc"
    SOFTWARE = "Software"
    AI = "AI"
    PSD = "PSD"
    TEMPLATE = "Template"
    OTHER = "Other"


class ProductLogo(str, enum.Enum):
    """Icon shown next to a product in the storefront."""

    PHOTOSHOP = "photoshop"
    ILLUSTRATOR = "illustrator"
    MSWORD = "msword"
    EXCEL = "excel"
    POWERPOINT = "powerpoint"
    AUTOCAD = "autocad"
    OFFICE = "office"
    GRAPHICS = "graphics"
    CV = "cv"
    TEMPLATE = "template"
    SOFTWARE = "software"
    GENERIC = "generic"


class Course(BaseModel):
    """A course offered by the center. ``fee`` is the admission price."""

    __tablename__ = "courses"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    title_bn: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    description_bn: Mapped[str] = mapped_column(Text, nullable=False, default="")

    type: Mapped[CourseType] = mapped_column(
        Enum(CourseType, name="course_type"), nullable=False, default=CourseType.PRIVATE
    )

    fee: Mapped[int] = mapped_column(Integer, nullable=False)
    duration: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title={self.title}, fee={self.fee})>"


class Product(BaseModel):
    """A digital product. ``file_url`` is only handed out to verified buyers."""

    __tablename__ = "products"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    title_bn: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    type: Mapped[ProductType] = mapped_column(
        Enum(ProductType, name="product_type"), nullable=False
    )
    logo_key: Mapped[ProductLogo] = mapped_column(
        Enum(ProductLogo, name="product_logo"), nullable=False, default=ProductLogo.GENERIC
    )

    price: Mapped[int] = mapped_column(Integer, nullable=False)
    thumbnail_url: Mapped[str] = mapped_column(String(500), nullable=False)
    file_url: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, title={self.title}, price={self.price})>"
