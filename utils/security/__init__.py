"""
Security Utilities

Settings encryption and captcha verification.
"""

from .crypto import SettingsCipher, SettingsCipherError, generate_settings_key
from .recaptcha import RecaptchaVerifier

__all__ = [
    'SettingsCipher',
    'SettingsCipherError',
    'generate_settings_key',
    'RecaptchaVerifier',
]
