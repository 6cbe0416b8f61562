# Services package init
"""
RentOK Admin Backend — Services Layer
======================================

What:  Business logic between the route handlers (HTTP) and the database.
How:   Stateless service classes with one shared module-level instance each.
       Database sessions are passed in per call.

Service Inventory:
    - session_service:  session cookie codec (pure functions)
    - auth_service:     bcrypt login against the admins table
    - coupon_service:   coupon CRUD, validation and redemption
    - tag_service:      tag CRUD and slug generation
    - order_service:    order CRUD and status updates
    - email_service:    Resend transactional emails
    - imagekit_service: upload signatures and file deletion
"""
