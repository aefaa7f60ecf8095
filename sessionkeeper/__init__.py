"""
Sessionkeeper - In-Process Session Store

Issues opaque, unguessable session identifiers, keeps server-side state
for each of them, and reclaims that state after a period of inactivity.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- ids: Secure session identifier generation
- session: Session registry and expiration sweep
- middleware: Cookie-based binding of sessions to HTTP requests
- api: REST API models
"""

__version__ = "1.0.0"
