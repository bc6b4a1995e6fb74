"""
Website tour packages and their destinations (website database).
"""
from app.extensions import db
from app.utils.formatting import slugify, utcnow


PACKAGE_TYPES = ('single', 'combined')


class Destination(db.Model):
    """A place a package travels to."""

    __tablename__ = 'destinations'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), index=True)
    category = db.Column(db.String(100))
    description = db.Column(db.Text)
    active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    packages = db.relationship('Package', back_populates='destination')

    def __repr__(self):
        return f'<Destination {self.name}>'


class Package(db.Model):
    """Tour package shown on the public website."""

    __tablename__ = 'packages'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
    duration = db.Column(db.String(50))
    subtitle = db.Column(db.String(255))
    description = db.Column(db.Text)
    inclusions = db.Column(db.Text)
    exclusions = db.Column(db.Text)
    destination_id = db.Column(db.Integer, db.ForeignKey('destinations.id'), index=True)
    package_type = db.Column(db.String(20), default='single', nullable=False)
    tour_type = db.Column(db.String(100))
    frontend_category = db.Column(db.String(100))
    image = db.Column(db.String(255))
    image_alt = db.Column(db.String(255))
    active = db.Column(db.Boolean, default=True, nullable=False)
    featured = db.Column(db.Boolean, default=False, nullable=False)
    display_order = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    destination = db.relationship('Destination', back_populates='packages')
    combined_destinations = db.relationship(
        'PackageDestination',
        back_populates='package',
        cascade='all, delete-orphan',
        order_by='PackageDestination.display_order',
    )

    def __repr__(self):
        return f'<Package {self.title}>'

    @property
    def is_combined(self):
        return self.package_type == 'combined'

    @property
    def combined_destinations_list(self):
        """Comma separated destination names, combined packages only."""
        if not self.is_combined:
            return None
        return ', '.join(
            link.destination.name for link in self.combined_destinations if link.destination
        )

    def set_combined_destinations(self, destination_ids):
        """Replace the ordered destination list (display_order starts at 1)."""
        self.combined_destinations = [
            PackageDestination(destination_id=destination_id, display_order=index)
            for index, destination_id in enumerate(destination_ids, start=1)
        ]

    @staticmethod
    def generate_slug(title, exclude_id=None):
        """Generate a unique slug from the title: 'Boracay' -> 'boracay', 'boracay-1', ..."""
        base_slug = slugify(title) or 'package'
        slug = base_slug
        counter = 1
        while True:
            query = Package.query.filter_by(slug=slug)
            if exclude_id is not None:
                query = query.filter(Package.id != exclude_id)
            if query.first() is None:
                return slug
            slug = f'{base_slug}-{counter}'
            counter += 1


class PackageDestination(db.Model):
    """Ordered destination of a combined package."""

    __tablename__ = 'package_destinations'

    id = db.Column(db.Integer, primary_key=True)
    package_id = db.Column(db.Integer, db.ForeignKey('packages.id', ondelete='CASCADE'), nullable=False, index=True)
    destination_id = db.Column(db.Integer, db.ForeignKey('destinations.id'), nullable=False)
    display_order = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    package = db.relationship('Package', back_populates='combined_destinations')
    destination = db.relationship('Destination')
