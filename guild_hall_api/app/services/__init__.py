"""
Service layer abstraction.

Each service encapsulates business logic for a domain and raises the
errors from ``core.errors``; API handlers stay thin and only translate
requests into service calls.
"""
