"""
Data Models Module
----------------
Contains Pydantic models for data validation and serialization.
Defines addresses, coordinates, notices, profiles and feed posts.
"""
