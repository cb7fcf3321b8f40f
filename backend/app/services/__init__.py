# Services package init
"""
PetHaven Backend — Services Layer
===================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
Why:   Routes handle HTTP, services handle business rules and can be tested
       without a server.

Service Inventory:
    - ApplicationService: adoption application repository (create/list/get/delete)
    - StatusTransitionService: application status changes + pet side effect, atomically
    - PetStatusLedger: narrow read/write access to pets.status
    - PetService: pet catalog CRUD and image attachment
    - BreedService: dog/cat breed lookup and the species-conditional breed join
    - UserService: signup, login, JWT issue/verify
    - FileService: blob storage for uploaded images
"""
