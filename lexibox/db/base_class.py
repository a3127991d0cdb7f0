from sqlalchemy.orm import DeclarativeBase

# Largest value a signed 32-bit INTEGER primary/foreign key can hold.
INT_MAX = 2**31 - 1


class Base(DeclarativeBase):
    """
    Base class for every SQLAlchemy model.
    Used to initialise the database schema.
    """
