"""
SQLAlchemy models for the Vantripper back office.
All models are imported here for easy access.
"""
from app.models.user import User, ApiToken
from app.models.package import Package, Destination, PackageDestination, PACKAGE_TYPES
from app.models.invoice import (
    InvoicePackage,
    InvoiceTerm,
    Category,
    Subcategory,
    Customer,
    Invoice,
)
from app.models.terms import TermsAndCondition
from app.models.submission import (
    BookingPackage,
    TermsQuestion,
    Submission,
    Companion,
    SubmissionAnswer,
    PaymentReceipt,
)
from app.models.tour_operations import (
    CompletedTour,
    CancelledTour,
    DomesticTour,
    LuzonJoiner,
)

__all__ = [
    'User', 'ApiToken',
    'Package', 'Destination', 'PackageDestination', 'PACKAGE_TYPES',
    'InvoicePackage', 'InvoiceTerm', 'Category', 'Subcategory', 'Customer', 'Invoice',
    'TermsAndCondition',
    'BookingPackage', 'TermsQuestion', 'Submission', 'Companion', 'SubmissionAnswer', 'PaymentReceipt',
    'CompletedTour', 'CancelledTour', 'DomesticTour', 'LuzonJoiner',
]
