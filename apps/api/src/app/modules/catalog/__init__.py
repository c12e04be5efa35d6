"""
Catalog module - Courses and digital products.
"""

from app.modules.catalog.models import Course, CourseType, Product, ProductType

__all__ = ["Course", "CourseType", "Product", "ProductType"]
