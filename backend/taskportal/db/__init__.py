"""
Database module for the Student Task Portal

Contains seed data.
"""
