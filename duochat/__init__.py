"""DuoChat: two AI debaters that argue, speak and get scored live."""

__version__ = "0.1.0"
