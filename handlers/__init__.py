"""
handlers/ - Presentation Layer
================================
HTTP route handlers. Each handler reads the request, makes one repository
call through the envelope layer, and sends the JSON envelope back.
No business logic lives here.
"""
