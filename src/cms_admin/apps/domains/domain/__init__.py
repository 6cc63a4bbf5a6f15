# Domain package for domains
"""
This package contains the domain models, the config codec, drift detection and
the collaborator interfaces of domain configuration management.

The domain layer is independent of Django and focuses solely on the rules of
domain configurations.
"""
