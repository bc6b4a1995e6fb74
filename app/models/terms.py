"""
Terms and conditions documents (invoicing database).
"""
import os

from app.extensions import db
from app.utils.formatting import utcnow


class TermsAndCondition(db.Model):
    """A terms-and-conditions document, optionally backed by a PDF."""

    __bind_key__ = 'invoice'
    __tablename__ = 'terms_and_conditions'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    pdf_file_path = db.Column(db.String(500))
    pdf_file_name = db.Column(db.String(255))
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f'<TermsAndCondition {self.title}>'

    @property
    def has_pdf(self):
        return bool(self.pdf_file_path)

    @property
    def display_file_name(self):
        """Original upload name, falling back to the stored file name."""
        if not self.pdf_file_path:
            return None
        return self.pdf_file_name or os.path.basename(self.pdf_file_path)
