# Routes package init
"""
RentOK Admin Backend — API Routes Package
==========================================

What:  HTTP route handlers. Each module covers one resource.

Route Inventory:
    - auth.py:      POST /login, POST /logout
    - coupons.py:   /api/coupons (CRUD), /api/coupons/validate, /api/coupons/{id}/use
    - tags.py:      /api/tags (CRUD), /api/tags/active
    - orders.py:    /api/orders (CRUD), /api/orders/send-status-email
    - vendors.py:   POST /api/vendors/welcome-email
    - imagekit.py:  GET /api/imagekit/auth, DELETE /api/imagekit/delete
    - health.py:    GET /health

Every route except /login and /health sits behind the Access Gate: a request
without a fresh session cookie is redirected to /login before it gets here.
Handlers stay thin; business rules live in rentok.services.
"""
