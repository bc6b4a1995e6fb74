"""
Booking form models (terms database): booking packages, the yes/no terms
questions asked per package, and customer submissions with their
companions, answers and payment receipts.
"""
from app.extensions import db
from app.utils.formatting import utcnow


class BookingPackage(db.Model):
    """Package a customer books through the terms form."""

    __bind_key__ = 'tnc'
    __tablename__ = 'packages'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    questions = db.relationship('TermsQuestion', back_populates='package')

    def __repr__(self):
        return f'<BookingPackage {self.name}>'


class TermsQuestion(db.Model):
    """Yes/no question shown on a package's booking form."""

    __bind_key__ = 'tnc'
    __tablename__ = 'terms_questions'

    id = db.Column(db.Integer, primary_key=True)
    package_id = db.Column(db.Integer, db.ForeignKey('packages.id'), nullable=False, index=True)
    question_text = db.Column(db.Text, nullable=False)
    yes_option = db.Column(db.String(255), nullable=False)
    no_option = db.Column(db.String(255), nullable=False)
    sort_order = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    package = db.relationship('BookingPackage', back_populates='questions')
    answers = db.relationship('SubmissionAnswer', back_populates='question')

    def __repr__(self):
        return f'<TermsQuestion {self.id} package={self.package_id}>'

    @property
    def package_name(self):
        return self.package.name if self.package else 'Unknown Package'

    @staticmethod
    def next_sort_order(package_id):
        """Max sort_order of the package + 1 (1 for its first question)."""
        current = db.session.query(db.func.max(TermsQuestion.sort_order)).filter(
            TermsQuestion.package_id == package_id
        ).scalar()
        return (current or 0) + 1


class Submission(db.Model):
    """Customer booking form submission."""

    __bind_key__ = 'tnc'
    __tablename__ = 'submissions'

    id = db.Column(db.Integer, primary_key=True)
    package_type = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    lead_guest = db.Column(db.String(255), nullable=False)
    fb_name = db.Column(db.String(255))
    contact_number = db.Column(db.String(20), nullable=False)
    payment_date = db.Column(db.Date)
    payment_amount = db.Column(db.Numeric(12, 2))
    has_payment_receipt = db.Column(db.Boolean, default=False, nullable=False)
    archived = db.Column(db.Boolean, default=False, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    companions = db.relationship(
        'Companion', back_populates='submission', cascade='all, delete-orphan',
        order_by='Companion.id',
    )
    answers = db.relationship(
        'SubmissionAnswer', back_populates='submission', cascade='all, delete-orphan',
        order_by='SubmissionAnswer.id',
    )
    receipts = db.relationship(
        'PaymentReceipt', back_populates='submission', cascade='all, delete-orphan',
        order_by='PaymentReceipt.id',
    )

    def __repr__(self):
        return f'<Submission {self.id} {self.email}>'


class Companion(db.Model):
    __bind_key__ = 'tnc'
    __tablename__ = 'companions'

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(db.Integer, db.ForeignKey('submissions.id', ondelete='CASCADE'), nullable=False, index=True)
    full_name = db.Column(db.String(255), nullable=False)

    submission = db.relationship('Submission', back_populates='companions')


class SubmissionAnswer(db.Model):
    __bind_key__ = 'tnc'
    __tablename__ = 'submission_answers'

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(db.Integer, db.ForeignKey('submissions.id', ondelete='CASCADE'), nullable=False, index=True)
    question_id = db.Column(db.Integer, db.ForeignKey('terms_questions.id', ondelete='SET NULL'))
    answer = db.Column(db.String(255), nullable=False)

    submission = db.relationship('Submission', back_populates='answers')
    question = db.relationship('TermsQuestion', back_populates='answers')

    @property
    def question_text(self):
        return self.question.question_text if self.question else 'Unknown Question'


class PaymentReceipt(db.Model):
    __bind_key__ = 'tnc'
    __tablename__ = 'payment_receipts'

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(db.Integer, db.ForeignKey('submissions.id', ondelete='CASCADE'), nullable=False, index=True)
    file_name = db.Column(db.String(255), nullable=False)
    file_path = db.Column(db.String(500), nullable=False)
    file_size = db.Column(db.Integer)
    mime_type = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=utcnow)

    submission = db.relationship('Submission', back_populates='receipts')
