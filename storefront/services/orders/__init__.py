"""
Order services: checkout sequencing, status lifecycle and order queries.
"""
