from .provider import BirthdayProvider, NullBirthdayProvider, SqliteBirthdayProvider

__all__ = ["BirthdayProvider", "NullBirthdayProvider", "SqliteBirthdayProvider"]
