# Infrastructure package for domains
"""
This package contains the Django implementations of the domain collaborators:
ORM models, the domain store, the filesystem config source and the mail notifier.
"""
