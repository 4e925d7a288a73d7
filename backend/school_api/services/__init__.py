# Services package init
"""
School API Backend — Services Layer
=====================================

What:  Account and token logic shared by the identity handlers, the security
       dependencies and startup seeding.

Service Inventory:
    - IdentityService: user accounts, password hashing/policy, role grants
    - TokenService: issues and verifies JWT bearer tokens
"""
