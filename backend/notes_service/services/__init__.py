"""
Notes Service — Services Layer
==============================

What:  Business logic between routes (HTTP) and the Note Store (persistence).

Service Inventory:
    - NoteService: list / get / create / update / delete with input validation
"""
