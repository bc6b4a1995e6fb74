"""
Tour operations ledgers (invoicing database): completed, cancelled,
domestic and Luzon joiner tours.

The domestic and Luzon joiner tables predate the API; their ids are not
auto-incremented and their flag columns hold 'YES' / 'NO'.
"""
from app.extensions import db
from app.utils.formatting import utcnow, YES


FOLLOWUP_STATUS_LABELS = {
    '1st Follow up sent': '1st Follow-up Sent',
    '1st Text Sent': '1st Text Sent',
    'No Follow Up': 'No Follow-up',
}

TAIL_END_LABELS = {
    'No Review': 'No Review',
    'With Review Posted': 'Review Posted',
    'With Photos': 'Photos Shared',
    'FB Feedback Only': 'FB Feedback Only',
    'No Review, No Feedback, No Photo': 'No Activity',
    'ALL GOOD POSTED': 'All Good - Posted',
}

REFUND_STATUSES = ('Pending', 'Processing', 'Completed', 'Not Applicable')
PAYMENT_STATUSES = ('Partially Paid', 'Fully Paid')
COORDINATOR_CHOICES = ('With', 'None')


class CompletedTour(db.Model):
    __bind_key__ = 'invoice'
    __tablename__ = 'completed_tours'

    id = db.Column(db.Integer, primary_key=True)
    tour_id = db.Column(db.Integer)
    assigned_team = db.Column(db.String(255))
    followup_status = db.Column(db.String(255))
    tail_end = db.Column(db.String(255))
    completion_date = db.Column(db.DateTime)
    notes = db.Column(db.Text)
    customer_assigned = db.Column(db.Boolean, default=False)
    invoice_no = db.Column(db.String(255), index=True)
    travel_dates = db.Column(db.String(100))
    destination = db.Column(db.String(255))
    tour_type = db.Column(db.String(50))
    days = db.Column(db.Integer)
    pax = db.Column(db.Integer)
    lead_guest = db.Column(db.String(100))

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    customer = db.relationship(
        'Customer',
        primaryjoin='foreign(CompletedTour.invoice_no) == Customer.invoice_no',
        uselist=False,
        viewonly=True,
    )
    invoice = db.relationship(
        'Invoice',
        primaryjoin='foreign(CompletedTour.invoice_no) == Invoice.invoice_no',
        uselist=False,
        viewonly=True,
    )

    @property
    def followup_status_display(self):
        return FOLLOWUP_STATUS_LABELS.get(self.followup_status, self.followup_status)

    @property
    def tail_end_display(self):
        return TAIL_END_LABELS.get(self.tail_end, self.tail_end)


class CancelledTour(db.Model):
    __bind_key__ = 'invoice'
    __tablename__ = 'cancelled_tours'

    id = db.Column(db.Integer, primary_key=True)
    tour_id = db.Column(db.Integer)
    cancellation_person = db.Column(db.String(255))
    cancellation_reason = db.Column(db.Text)
    refund_status = db.Column(db.String(50))
    cancellation_date = db.Column(db.DateTime)
    days = db.Column(db.Integer)
    pax = db.Column(db.Integer)
    with_coordinator = db.Column(db.String(10))
    pickup_point = db.Column(db.String(255))
    balance = db.Column(db.Numeric(12, 2))
    payment_status = db.Column(db.String(50))
    accommodation = db.Column(db.String(255))
    room_setup = db.Column(db.String(255))
    booked_accommodation = db.Column(db.Boolean)
    van_details_sent = db.Column(db.Boolean)
    assigned_team = db.Column(db.String(255))
    status = db.Column(db.String(50))
    notes = db.Column(db.Text)
    lead_guest = db.Column(db.String(255))
    contact = db.Column(db.String(100))
    destination = db.Column(db.String(255))

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    @property
    def with_coordinator_display(self):
        return 'Yes' if self.with_coordinator == 'With' else 'No'


class LegacyIdMixin:
    """Tables without AUTO_INCREMENT: new rows take max(id) + 1."""

    @classmethod
    def next_id(cls):
        current = db.session.query(db.func.max(cls.id)).scalar()
        return (current or 0) + 1


class DomesticTour(LegacyIdMixin, db.Model):
    __bind_key__ = 'invoice'
    __tablename__ = 'domestic_tours'

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    travel_dates = db.Column(db.String(100))
    destination = db.Column(db.String(255))
    days = db.Column(db.Integer)
    pax = db.Column(db.Integer)
    lead_guest = db.Column(db.String(255))
    contact = db.Column(db.String(100))
    pickup_details = db.Column(db.Text)
    balance = db.Column(db.Numeric(12, 2))
    payment_status = db.Column(db.String(50))
    accommodation = db.Column(db.String(255))
    booked_accommodation = db.Column(db.String(3))
    coordinated_with_supplier = db.Column(db.String(3))
    hotel_balance = db.Column(db.String(255))
    transfer_details_sent = db.Column(db.String(3))
    handled_by = db.Column(db.String(255))
    status = db.Column(db.String(50))
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    @property
    def coordinated_with_supplier_display(self):
        return 'Yes' if self.coordinated_with_supplier == YES else 'No'


class LuzonJoiner(LegacyIdMixin, db.Model):
    __bind_key__ = 'invoice'
    __tablename__ = 'luzon_exclusive'

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    travel_dates = db.Column(db.String(100))
    destination = db.Column(db.String(255))
    days = db.Column(db.Integer)
    pax = db.Column(db.Integer)
    with_coordinator = db.Column(db.String(10))
    lead_guest = db.Column(db.String(255))
    contact = db.Column(db.String(100))
    pickup_point = db.Column(db.String(255))
    balance = db.Column(db.Numeric(12, 2))
    payment_status = db.Column(db.String(50))
    accommodation = db.Column(db.String(255))
    room_setup = db.Column(db.String(255))
    booked_accommodation = db.Column(db.String(3))
    van_details_sent = db.Column(db.String(3))
    assigned_team = db.Column(db.String(255))
    status = db.Column(db.String(50))
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    @property
    def with_coordinator_display(self):
        return 'Yes' if self.with_coordinator == 'With' else 'No'
