"""
Domain Layer

Entities, value objects, errors and events of the file lifecycle.
"""
