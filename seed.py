from app import create_app, db
from app.models import User, Room, Hotel

app = create_app()

with app.app_context():
    db.create_all()

    # Create Admin
    if not User.query.filter_by(email='admin@hotel.com').first():
        admin = User(name='Administrator', email='admin@hotel.com', role='admin')
        admin.set_password('password')
        db.session.add(admin)
        print("Admin created (admin@hotel.com/password)")

    # Create Rooms
    rooms_data = [
        {"type": "Standard", "number": "101", "price": 500000, "capacity": 2, "amenities": ["wifi", "tv"]},
        {"type": "Standard", "number": "102", "price": 500000, "capacity": 2, "amenities": ["wifi", "tv"]},
        {"type": "Deluxe", "number": "201", "price": 900000, "capacity": 3, "amenities": ["wifi", "tv", "minibar"]},
        {"type": "Suite", "number": "301", "price": 1800000, "capacity": 4, "amenities": ["wifi", "tv", "minibar", "bathtub"]}
    ]

    for r_data in rooms_data:
        if not Room.query.filter_by(number=r_data['number']).first():
            room = Room(images=[], **r_data)
            db.session.add(room)
            print(f"Room {room.number} created.")

    # Hotel
    if not Hotel.get():
        db.session.add(Hotel(name='Hotel Booking', description='Sample hotel', address='1 Le Loi',
                             city='Ho Chi Minh City', images=[], amenities=['wifi', 'pool'], is_configured=True))
        print("Hotel created.")

    db.session.commit()
    print("Database seeded successfully.")
