"""
Admissions Module

Student applications to courses. An admission is approved, and receives its
roll number, when the payment made against it is verified.
"""

from app.modules.admissions.router import router

__all__ = ["router"]
