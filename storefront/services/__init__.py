"""
Business services. Each service is constructed per request with the
request's database session.
"""
