"""
frontend — client-side session state and route guarding.

Mirrors the credentials issued by the auth API into durable local storage
and decides which views the current session may render.
"""
