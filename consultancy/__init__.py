"""Debounced auto-persistence for consultancy record editing."""

from consultancy.utils.constants import APP_DISPLAY_NAME, VERSION

__app_name__ = APP_DISPLAY_NAME
__version__ = VERSION
