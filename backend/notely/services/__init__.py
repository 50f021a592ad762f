# Services package init
"""
Notely Backend — Services Layer
================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Services accept the request's AsyncSession plus domain arguments,
       apply validation and ownership rules, and return ORM objects.

Service Inventory:
    - UserService: user creation, listing, API-key lookup
    - NoteService: owner-scoped note creation and listing
"""
