# Application package for domains
"""
This package contains the use cases of domain management: the reconciliation
flow, the domain rules, and the domain and membership services.
"""
