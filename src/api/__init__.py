"""
API Module
---------
Provides RESTful API endpoints using FastAPI.
Features include:
- Resolving CEPs into addresses and coordinates
- Saving cell locations
- Reading and interacting with the social feed
- Generating AI summaries for meeting minutes
"""
