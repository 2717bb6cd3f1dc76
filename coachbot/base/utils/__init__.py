"""Pure helpers: profile heuristics and prompt builders."""
