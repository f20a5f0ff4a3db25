from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    store: str = "memory"
    locale: str = "pt-BR"
    currency_symbol: str = "R$"
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_access_token: str = ""
    supabase_timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            store=os.getenv("FINFLOW_STORE", "memory").strip().lower(),
            locale=os.getenv("FINFLOW_LOCALE", "pt-BR"),
            currency_symbol=os.getenv("FINFLOW_CURRENCY_SYMBOL", "R$"),
            supabase_url=os.getenv("SUPABASE_URL", ""),
            supabase_anon_key=os.getenv("SUPABASE_ANON_KEY", ""),
            supabase_access_token=os.getenv("SUPABASE_ACCESS_TOKEN", ""),
            supabase_timeout_seconds=float(os.getenv("SUPABASE_TIMEOUT_SECONDS", "30")),
        )
