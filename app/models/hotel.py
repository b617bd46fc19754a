from app.extensions import db
from app.models.base import TimestampMixin, isoformat

# The system describes exactly one hotel, stored under a fixed key
HOTEL_ID = 'hotel'


class Hotel(TimestampMixin, db.Model):
    __tablename__ = 'hotel'

    id = db.Column(db.String(24), primary_key=True, default=HOTEL_ID)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=False)
    address = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(128), nullable=False)
    images = db.Column(db.JSON, default=list)
    rating = db.Column(db.Float, default=0, nullable=False)
    amenities = db.Column(db.JSON, default=list)
    is_configured = db.Column(db.Boolean, default=False, nullable=False)

    __table_args__ = (
        db.CheckConstraint('rating >= 0 AND rating <= 5', name='check_hotel_rating_range'),
    )

    @classmethod
    def get(cls):
        return db.session.get(cls, HOTEL_ID)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'address': self.address,
            'city': self.city,
            'images': self.images or [],
            'rating': self.rating,
            'amenities': self.amenities or [],
            'isConfigured': self.is_configured,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at)
        }
