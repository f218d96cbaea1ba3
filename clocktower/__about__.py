__version__ = "1.0.0"
__description__ = "clocktower : REST CRUD controllers for Flask, SQLAlchemy and marshmallow"
