"""emojify - short-code to emoji stream filter.

Replaces delimited short codes such as ``:thumbs_up:`` in a text stream with
the emoji whose CLDR text-to-speech annotation matches the code.
"""

__version__ = "0.1.0"
