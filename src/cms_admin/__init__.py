"""
CMS admin service.

Django project for managing domain configurations and domain membership.
"""
