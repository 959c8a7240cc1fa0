# Services package init
"""
Notebox Backend — Services Layer
==================================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Services take an AsyncSession plus plain values, enforce the rules
       and raise NoteboxError subclasses; they never see Request objects.

Service Inventory:
    - AuthService:  credential store (register, authenticate)
    - TokenService: session token issue/verify (one instance per app)
    - NoteService:  owner-scoped note CRUD
"""
