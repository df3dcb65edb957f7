"""
messaging/ - Transport Layer
============================
Interchangeable outbound messaging providers. Everything that sends a
message outside of a direct Telegram reply goes through this interface.
"""
