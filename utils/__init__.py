"""
Utilities Package

Organized by purpose:
- auth: Password hashing, signed tokens, transit decryption, field rules, auth flow
- email: Outbound SMTP email
- errors: Application exceptions and FastAPI exception handlers
- monitoring: Structured logging with correlation ids
- security: Settings encryption and captcha verification

Subpackages are imported directly (``from utils.auth.flow import AuthFlow``);
this module stays import-light so models can depend on ``utils.auth``.
"""
