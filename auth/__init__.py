"""auth/ -- Password hashing, signed tokens, the access guard and ownership checks.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or social/.
api/ imports from auth/, not the other way around.
"""
