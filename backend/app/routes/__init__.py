# Routes package init
"""
PetHaven Backend — API Routes Package
=======================================

Route Inventory:
    - applications.py: POST /application, GET/PUT/DELETE /applications...
    - pets.py:         /pets CRUD and /pets/{id}/image
    - breeds.py:       /breeds, /breeds/dogs, /breeds/cats
    - auth.py:         /signup, /login, /me
    - uploads.py:      POST /upload, GET /files/{path}
    - health.py:       GET /health

Routes stay THIN: extract request data, call a service, return the schema.
"""
