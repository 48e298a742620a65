"""
Database Module
-------------
Handles database connections, ORM models, and database operations.
Uses SQLAlchemy and defines the schema for profiles, cells, feed posts and minutes.
"""
