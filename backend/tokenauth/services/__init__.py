"""Service layer: token lifecycle orchestration and identity lookup.

Callers import concrete services from their modules, e.g.
:mod:`tokenauth.services.auth.service`.
"""
