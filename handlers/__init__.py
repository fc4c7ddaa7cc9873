"""
handlers/ - Presentation Layer
================================
FastAPI routers and middleware. Each handler receives an HTTP request,
delegates to the BookRepository, and turns the result or error into a response.
No business logic lives here.
"""
