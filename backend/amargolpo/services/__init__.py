# Services package init
"""
AmarGolpo Backend — Services Layer
====================================

What:  Business logic between routes (HTTP) and the document store.

Service Inventory:
    - ratings.py:        apply_rating / average_rating (pure)
    - likes.py:          toggle_like (pure)
    - book_service.py:   BookService, CRUD + rating updates on `books`
    - quote_service.py:  QuoteService, listing, creation, likes on `quotes`

Services receive the DocumentStore per call and hold no state of their own.
"""
