"""
Invoicing database models: invoice line packages, invoice terms,
itinerary categories/sub-categories and the customer/invoice records that
the tour-operations ledgers refer to by invoice number.
"""
from app.extensions import db
from app.utils.formatting import utcnow


class InvoicePackage(db.Model):
    """Line item template used when building invoices."""

    __bind_key__ = 'invoice'
    __tablename__ = 'invoice_package'

    id = db.Column(db.Integer, primary_key=True)
    sku = db.Column(db.String(255))
    quantity = db.Column(db.Integer, default=1, nullable=False)
    category = db.Column(db.String(255))
    items = db.Column(db.Text)
    item_full_details = db.Column(db.Text)
    price = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def __repr__(self):
        return f'<InvoicePackage {self.sku}>'


class InvoiceTerm(db.Model):
    """Terms block printed on invoices, grouped by category."""

    __bind_key__ = 'invoice'
    __tablename__ = 'terms'

    id = db.Column(db.Integer, primary_key=True)
    category = db.Column(db.String(255), nullable=False)
    details = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def __repr__(self):
        return f'<InvoiceTerm {self.category}>'


class Category(db.Model):
    """Itinerary category."""

    __bind_key__ = 'invoice'
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    category_name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)

    subcategories = db.relationship(
        'Subcategory',
        back_populates='category',
        cascade='all, delete-orphan',
    )

    def __repr__(self):
        return f'<Category {self.category_name}>'


class Subcategory(db.Model):
    """Itinerary item belonging to a category."""

    __bind_key__ = 'invoice'
    __tablename__ = 'subcategories'

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id', ondelete='CASCADE'), nullable=False, index=True)
    subcategory_name = db.Column(db.String(255), nullable=False)
    details = db.Column(db.Text)

    category = db.relationship('Category', back_populates='subcategories')

    def __repr__(self):
        return f'<Subcategory {self.subcategory_name}>'


class Customer(db.Model):
    """Invoice customer, looked up by invoice number."""

    __bind_key__ = 'invoice'
    __tablename__ = 'customers'

    id = db.Column(db.Integer, primary_key=True)
    invoice_no = db.Column(db.String(255), index=True)
    name = db.Column(db.String(255))
    email = db.Column(db.String(255))
    contact = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=utcnow)


class Invoice(db.Model):
    """Issued invoice, looked up by invoice number."""

    __bind_key__ = 'invoice'
    __tablename__ = 'invoices'

    id = db.Column(db.Integer, primary_key=True)
    invoice_no = db.Column(db.String(255), unique=True, index=True)
    invoice_status = db.Column(db.String(50))
    total_price = db.Column(db.Numeric(12, 2))
    amount_due = db.Column(db.Numeric(12, 2))
    payment_received = db.Column(db.Numeric(12, 2))
    created_at = db.Column(db.DateTime, default=utcnow)
