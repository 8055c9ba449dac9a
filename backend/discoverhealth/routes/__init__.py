# Routes package init
"""
DiscoverHealth Backend — API Routes Package
=============================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory (resources and users are mounted under API_PREFIX, default /api):
    - resources.py:  GET  /resources/{region}
                     POST /resources
                     POST /resources/{id}/recommend
                     POST /resources/{id}/reviews
    - users.py:      POST /users/signup, /users/login, /users/logout
                     GET  /users/user
    - health.py:     GET  /health
    - deps.py:       shared dependencies (services, session, login gate)

Design Principle:
    Routes are THIN. They extract data from the request, call a service and
    pick the status code. Business rules live in services.
"""
