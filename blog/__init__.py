"""Continued Education Blog API."""
