"""
User and ApiToken models.

Accounts self-register, must verify their email address and then wait for an
administrator to approve them before they can obtain an API token.
"""
import secrets
from datetime import timedelta

from werkzeug.security import generate_password_hash, check_password_hash

from app.extensions import db
from app.utils.formatting import utcnow


class User(db.Model):
    """Back office staff account (website database)."""

    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    emp_id = db.Column(db.String(50))
    name = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100))
    middle_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    gender = db.Column(db.String(20))
    address = db.Column(db.Text)
    birthdate = db.Column(db.Date)
    age = db.Column(db.Integer)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    email_verified_at = db.Column(db.DateTime)
    verification_token = db.Column(db.String(100), unique=True, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    contact = db.Column(db.String(50))
    position = db.Column(db.String(100))
    date_of_joining = db.Column(db.Date)
    type_of_contract = db.Column(db.String(100))
    department_id = db.Column(db.Integer)
    role_id = db.Column(db.Integer)
    status = db.Column(db.String(50))
    user_delete = db.Column(db.Boolean, default=False, nullable=False)
    user_archived = db.Column(db.Boolean, default=False, nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    is_approved = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    tokens = db.relationship(
        'ApiToken',
        back_populates='user',
        cascade='all, delete-orphan',
        lazy='dynamic',
    )

    def __repr__(self):
        return f'<User {self.email}>'

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def has_verified_email(self):
        return self.email_verified_at is not None

    def generate_verification_token(self):
        """Create (and store) a fresh email verification token."""
        self.verification_token = secrets.token_urlsafe(32)
        return self.verification_token

    def mark_email_as_verified(self):
        self.email_verified_at = utcnow()
        self.verification_token = None

    def revoke_tokens(self):
        """Delete every API token issued to this user. Returns the count removed."""
        return self.tokens.delete(synchronize_session=False)


class ApiToken(db.Model):
    """Issued bearer token. Deleting the row revokes the token."""

    __tablename__ = 'api_tokens'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    jti = db.Column(db.String(64), unique=True, nullable=False, index=True)
    abilities = db.Column(db.JSON, default=lambda: ['*'])
    last_used_at = db.Column(db.DateTime)
    expires_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utcnow)

    user = db.relationship('User', back_populates='tokens')

    def __repr__(self):
        return f'<ApiToken {self.name} user={self.user_id}>'

    @classmethod
    def issue(cls, user, name, expires_days):
        token = cls(
            user=user,
            name=name,
            jti=secrets.token_hex(16),
            expires_at=utcnow() + timedelta(days=expires_days),
        )
        db.session.add(token)
        return token

    @property
    def is_expired(self):
        return self.expires_at is not None and self.expires_at <= utcnow()
