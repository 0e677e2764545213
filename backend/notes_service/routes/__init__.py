"""
Notes Service — API Routes Package
==================================

Route Inventory:
    - notes.py:   /api/notes, /api/notes/{id}   (CRUD, envelope responses)
    - health.py:  GET /health                   (service health check)

Routes stay thin: read the request, call NoteService, build the envelope.
"""
