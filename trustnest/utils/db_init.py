"""Initialize the TrustNest database"""
from trustnest.extensions import db
from trustnest.models.user import User


def create_admin_user(email, name='Administrator'):
    """Create the admin account if it does not exist yet"""
    admin = User.query.filter_by(email=email).first()
    if admin:
        print(f"Admin user already exists: {email}")
        return admin

    print("Creating admin user...")
    admin = User(email=email, name=name, role='admin', is_active=True)
    db.session.add(admin)
    db.session.commit()
    print(f"Admin user created: {email}")
    return admin


def init_database(admin_email):
    """Create tables and the default admin account"""
    print("Creating database tables (preserving existing data)...")
    db.create_all()
    print("Tables created successfully")

    print("Checking for admin user...")
    return create_admin_user(admin_email)
