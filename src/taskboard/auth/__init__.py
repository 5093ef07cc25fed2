"""Authentication and session resolution.

Learn: One authentication path: email/password → signed JWT (7 days).
The client sends the token back in the Authorization header, and the
session resolver turns it into the acting User, or into "anonymous".

Anonymous is not an error at resolution time. Each protected operation
decides for itself, via get_current_user, that it needs an identity.
"""
