"""
auth — User authentication module.

Provides:
  • Signed token creation & verification
  • Password hashing (bcrypt)
  • Register / Login orchestration and API routes
  • ``get_current_user`` and ``restrict_to`` FastAPI dependencies
"""
