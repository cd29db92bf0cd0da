# Routes package init
"""
AmarGolpo Backend — API Routes Package
========================================

Route Inventory:
    - health.py:  GET /, GET /health
    - books.py:   GET/POST /books, GET/PUT/DELETE /books/{id}
    - quotes.py:  GET/POST /quotes, PUT /quotes/{id}/like, DELETE /quotes/{id}

Routes stay thin: extract input, call a service, return its result.
The DocumentStore reaches handlers through Depends(get_store).
"""
