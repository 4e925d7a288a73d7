# Routes package init
"""
School API Backend — API Routes Package
=========================================

What:  HTTP route handlers. Each module owns one resource.

Route Inventory:
    - students.py:        /api/students
    - departments.py:     /api/departments
    - instructors.py:     /api/instructors
    - subjects.py:        /api/subjects
    - authorization.py:   /api/authorization        (Admin only)
    - users.py:           /api/users
    - authentication.py:  /api/authentication/sign-in
    - health.py:          /health

Routes stay thin: build the command or query, hand it to `common.dispatch`,
return the rendered envelope. Business rules live in `school_api.features`.
"""
