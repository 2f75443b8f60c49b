# hackmap/__init__.py
"""
HackMap backend: hackathon discovery, team formation and skill-based
team matchmaking, served as a FastAPI application.

Usage (development):
    uvicorn hackmap.main:app --reload
"""
