"""Pydantic schemas and SQLAlchemy tables"""
