# models/preferences.py

from typing import Optional

from pydantic import BaseModel

from core.currency import DEFAULT_CURRENCY, DEFAULT_THEME, Currency, Theme


class Preferences(BaseModel):
    currency: Currency = DEFAULT_CURRENCY
    theme: Theme = DEFAULT_THEME


class PreferencesUpdate(BaseModel):
    currency: Optional[Currency] = None
    theme: Optional[Theme] = None
