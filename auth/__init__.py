"""auth/ -- Password hashing, sessions and the bearer-token guard.

Layer rule: auth/ may import from core/, db/ and users/.
It does NOT import from api/; api/ imports from auth/, not the other way around.
"""
