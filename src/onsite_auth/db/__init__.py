"""Async SQLAlchemy persistence for users and sessions."""
