"""Board and rules engines. No AI in here."""
