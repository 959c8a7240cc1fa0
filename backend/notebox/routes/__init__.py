# Routes package init
"""
Notebox Backend — API Routes Package
======================================

Route Inventory:
    - auth.py:    POST   /api/register        (create account)
                  POST   /api/login           (issue session token)
    - notes.py:   POST   /api/notes           (create, auth)
                  GET    /api/notes           (list own notes, auth)
                  GET    /api/notes/{id}      (read, auth)
                  PUT    /api/notes/{id}      (update, auth)
                  DELETE /api/notes/{id}      (delete, auth)
    - web.py:     GET    /                    (HTML client)
    - health.py:  GET    /health              (service health check)

Routes stay thin: extract input, call a service, pick the status code.
"""
