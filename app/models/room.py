from app.extensions import db
from app.models.base import TimestampMixin, new_object_id, isoformat

class Room(TimestampMixin, db.Model):
    __tablename__ = 'rooms'

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    type = db.Column(db.String(64), nullable=False)
    number = db.Column(db.String(20), unique=True, nullable=False)
    price = db.Column(db.Float, nullable=False)
    capacity = db.Column(db.Integer, nullable=False)
    description = db.Column(db.Text)
    amenities = db.Column(db.JSON, default=list)  # e.g. ["wifi", "minibar"]
    images = db.Column(db.JSON, default=list)

    # Derived from the active bookings; AvailabilityService recomputes it.
    is_available = db.Column(db.Boolean, default=True, nullable=False)

    __table_args__ = (
        db.CheckConstraint('price > 0', name='check_room_price_positive'),
        db.CheckConstraint('capacity > 0', name='check_room_capacity_positive'),
    )

    def summary(self):
        """Projection embedded in booking payloads."""
        return {
            'id': self.id,
            'type': self.type,
            'number': self.number,
            'price': self.price,
            'capacity': self.capacity,
            'amenities': self.amenities or [],
            'images': self.images or [],
            'description': self.description
        }

    def to_dict(self):
        data = self.summary()
        data.update({
            'isAvailable': self.is_available,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at)
        })
        return data
